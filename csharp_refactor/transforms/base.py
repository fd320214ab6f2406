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

"""Base transform classes for refactoring operations.

Defines the abstract interface for code transformations.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from csharp_refactor.analyzer import BaseCodeAnalyzer
from csharp_refactor.config import RefactorSettings, get_settings
from csharp_refactor.protocol import (
    CancellationToken,
    CodeEdit,
    RefactorPreview,
    RefactorRequest,
    RefactorResult,
    RefactorRisk,
    RefactorType,
)
from csharp_refactor.syntax.parser import CSharpDocument

logger = logging.getLogger(__name__)


class BaseTransform(ABC):
    """Abstract base class for code transformations."""

    def __init__(self, settings: Optional[RefactorSettings] = None):
        self._settings = settings

    @property
    def settings(self) -> RefactorSettings:
        return self._settings or get_settings()

    @property
    @abstractmethod
    def refactor_type(self) -> RefactorType:
        """The type of refactoring this transform handles."""
        ...

    @property
    def supported_languages(self) -> list[str]:
        """Languages this transform supports."""
        return ["c_sharp"]

    @property
    def risk_level(self) -> RefactorRisk:
        """Default risk level for this transform."""
        return RefactorRisk.LOW

    def validate(
        self,
        request: RefactorRequest,
        source: str,
    ) -> tuple[bool, list[str]]:
        """Validate if the transform can be applied.

        Args:
            request: Refactor request
            source: Source code

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        if request.refactor_type != self.refactor_type:
            errors.append(f"Transform type mismatch: expected {self.refactor_type}")

        return len(errors) == 0, errors

    @abstractmethod
    def preview(
        self,
        request: RefactorRequest,
        sources: dict[Path, str],
        analyzer: BaseCodeAnalyzer,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorPreview:
        """Generate a preview of the transform.

        Args:
            request: Refactor request
            sources: Dict mapping file paths to source code
            analyzer: Code analyzer instance
            cancellation: Checked before the tree is transformed

        Returns:
            RefactorPreview with proposed edits
        """
        ...

    def _load_document(
        self,
        preview: RefactorPreview,
        sources: dict[Path, str],
        analyzer: BaseCodeAnalyzer,
    ) -> Optional[CSharpDocument]:
        """Validate the request and parse the target file, recording errors on the preview."""
        target_file = preview.request.target.file_path
        if target_file not in sources:
            preview.errors.append(f"File not found: {target_file}")
            return None

        source = sources[target_file]
        is_valid, errors = self.validate(preview.request, source)
        if not is_valid:
            preview.errors.extend(errors)
            return None

        document = analyzer.parse(source, target_file)
        if document is None:
            preview.errors.append(f"Failed to parse {target_file}")
        return document

    def render(
        self,
        preview: RefactorPreview,
        sources: dict[Path, str],
    ) -> dict[Path, str]:
        """Apply the preview's edits in memory.

        Args:
            preview: Preview holding the edits
            sources: Dict mapping file paths to source code

        Returns:
            Dict mapping each affected file path to its new source
        """
        edits_by_file: dict[Path, list[CodeEdit]] = {}
        for edit in preview.edits:
            edits_by_file.setdefault(edit.file_path, []).append(edit)

        rendered = {}
        for file_path, edits in edits_by_file.items():
            if file_path not in sources:
                continue

            lines = sources[file_path].split("\n")

            # Sort edits in reverse order (by line, then column)
            edits = sorted(
                edits,
                key=lambda e: (e.location.start_line, e.location.start_column),
                reverse=True,
            )
            for edit in edits:
                lines = self._apply_edit(lines, edit)

            rendered[file_path] = "\n".join(lines)

        return rendered

    def apply(
        self,
        request: RefactorRequest,
        sources: dict[Path, str],
        analyzer: BaseCodeAnalyzer,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorResult:
        """Apply the transform.

        Default implementation generates preview and writes the rendered files.

        Args:
            request: Refactor request
            sources: Dict mapping file paths to source code
            analyzer: Code analyzer instance
            cancellation: Checked before the tree is transformed

        Returns:
            RefactorResult with applied changes
        """
        import time

        start_time = time.time()

        preview = self.preview(request, sources, analyzer, cancellation)

        if not preview.is_valid:
            return RefactorResult(
                request=request,
                success=False,
                warnings=list(preview.warnings),
                error_message="; ".join(preview.errors),
            )

        modified_files = []
        for file_path, new_source in self.render(preview, sources).items():
            try:
                with open(file_path, "w", encoding="utf-8", newline="") as f:
                    f.write(new_source)
                modified_files.append(file_path)
            except OSError as e:
                return RefactorResult(
                    request=request,
                    success=False,
                    error_message=f"Failed to write {file_path}: {e}",
                )

        duration_ms = (time.time() - start_time) * 1000

        return RefactorResult(
            request=request,
            success=True,
            edits_applied=preview.edit_count,
            files_modified=modified_files,
            warnings=list(preview.warnings),
            duration_ms=duration_ms,
        )

    def _apply_edit(
        self,
        lines: list[str],
        edit: CodeEdit,
    ) -> list[str]:
        """Apply a single edit to lines.

        Args:
            lines: Source lines
            edit: Edit to apply

        Returns:
            Modified lines
        """
        loc = edit.location
        start_line = loc.start_line - 1  # 0-indexed
        end_line = loc.end_line - 1

        if start_line == end_line:
            # Single line edit
            line = lines[start_line]
            new_line = line[: loc.start_column] + edit.new_text + line[loc.end_column :]
            lines[start_line] = new_line
        else:
            # Multi-line edit
            first_line = lines[start_line][: loc.start_column]
            last_line = lines[end_line][loc.end_column :]

            new_lines = edit.new_text.split("\n")
            new_lines[0] = first_line + new_lines[0]
            new_lines[-1] = new_lines[-1] + last_line

            lines = lines[:start_line] + new_lines + lines[end_line + 1 :]

        return lines
