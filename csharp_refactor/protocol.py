# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Refactoring protocol types and data structures.

Defines the core types shared by the transforms, the manager and the CLI.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class RefactorType(Enum):
    """Types of refactoring operations."""

    # Class operations
    GENERATE_DEPENDENCY_CONSTRUCTOR = "generate_dependency_constructor"

    # Method signature operations
    CONVERT_TO_SYNC = "convert_to_sync"
    CONVERT_TO_ASYNC = "convert_to_async"


class MethodMode(Enum):
    """Target mode of a method conversion."""

    SYNC = "sync"
    ASYNC = "async"


class RefactorRisk(Enum):
    """Risk level of a refactoring operation."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"  # callers must pass new constructor arguments
    HIGH = "high"  # signature changes without a body rewrite


class CancellationToken:
    """Cooperative cancellation flag handed to the transformation entry points.

    Transforms only check the flag on entry; a cancelled token makes them
    return their input untouched.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    """Check an optional token."""
    return token is not None and token.is_cancellation_requested


@dataclass
class SourceLocation:
    """A location in source code.

    Lines are 1-based, columns are 0-based character offsets within the line.
    """

    file_path: Path
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class CodeEdit:
    """A single edit to source code."""

    location: SourceLocation
    new_text: str
    description: str = ""

    @property
    def file_path(self) -> Path:
        return self.location.file_path


@dataclass
class RefactorRequest:
    """A request for a refactoring operation."""

    refactor_type: RefactorType
    target: SourceLocation


@dataclass
class RefactorPreview:
    """Preview of refactoring changes before applying."""

    request: RefactorRequest
    edits: list[CodeEdit] = field(default_factory=list)
    affected_files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    risk: RefactorRisk = RefactorRisk.SAFE

    @property
    def is_valid(self) -> bool:
        """Check if refactoring can be applied."""
        return len(self.errors) == 0

    @property
    def has_changes(self) -> bool:
        return len(self.edits) > 0

    @property
    def edit_count(self) -> int:
        """Total number of edits."""
        return len(self.edits)


@dataclass
class RefactorResult:
    """Result of applying a refactoring operation."""

    request: RefactorRequest
    success: bool
    edits_applied: int = 0
    files_modified: list[Path] = field(default_factory=list)
    backup_paths: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_message: str = ""
    duration_ms: float = 0.0

    def can_undo(self) -> bool:
        """Check if refactoring can be undone."""
        return len(self.backup_paths) > 0


@dataclass
class RefactorCapabilities:
    """Capabilities of a refactoring provider."""

    supported_refactors: list[RefactorType] = field(default_factory=list)
    supported_languages: list[str] = field(default_factory=list)
    supports_preview: bool = True
    supports_undo: bool = True
    supports_cross_file: bool = False


@dataclass
class RefactorSuggestion:
    """A suggested refactoring based on code analysis."""

    refactor_type: RefactorType
    target: SourceLocation
    reason: str
    confidence: float = 0.0  # 0-1
    risk: RefactorRisk = RefactorRisk.SAFE
    auto_fixable: bool = False
