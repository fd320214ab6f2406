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

"""Refactoring manager for orchestrating refactoring operations.

Provides a high-level API for code refactoring.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from csharp_refactor.analyzer import BaseCodeAnalyzer, get_analyzer
from csharp_refactor.config import RefactorSettings, get_settings
from csharp_refactor.protocol import (
    CancellationToken,
    MethodMode,
    RefactorCapabilities,
    RefactorPreview,
    RefactorRequest,
    RefactorResult,
    RefactorSuggestion,
    RefactorType,
    SourceLocation,
)
from csharp_refactor.transforms.base import BaseTransform
from csharp_refactor.transforms.convert import ConvertToAsyncTransform, ConvertToSyncTransform
from csharp_refactor.transforms.generate import GenerateDependencyConstructorTransform

logger = logging.getLogger(__name__)

_SKIPPED_DIRECTORIES = [".git", "bin", "obj", "node_modules", ".vs"]


def read_source(file_path: Path) -> str:
    """Read a source file keeping its line endings."""
    with open(file_path, encoding="utf-8", newline="") as f:
        return f.read()


class RefactorManager:
    """High-level manager for refactoring operations.

    Orchestrates code analysis, transform selection, and
    refactoring application.
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        backup_dir: Optional[Path] = None,
        settings: Optional[RefactorSettings] = None,
    ):
        """Initialize the refactor manager.

        Args:
            project_root: Root directory of the project
            backup_dir: Directory for backup files
            settings: Refactoring settings; process-wide settings when omitted
        """
        self.project_root = project_root or Path.cwd()
        self.settings = settings or get_settings()
        self.backup_dir = backup_dir or (self.project_root / self.settings.backup_dir)

        # Initialize transforms
        self._transforms: dict[RefactorType, BaseTransform] = {}
        self._register_builtin_transforms()

        # Initialize analyzers
        self._analyzers: dict[str, BaseCodeAnalyzer] = {}

    def _register_builtin_transforms(self) -> None:
        """Register built-in transforms."""
        transforms = [
            GenerateDependencyConstructorTransform(self.settings),
            ConvertToSyncTransform(self.settings),
            ConvertToAsyncTransform(self.settings),
        ]
        for transform in transforms:
            self._transforms[transform.refactor_type] = transform

    def register_transform(self, transform: BaseTransform) -> None:
        """Register a custom transform.

        Args:
            transform: Transform to register
        """
        self._transforms[transform.refactor_type] = transform

    def get_transform(self, refactor_type: RefactorType) -> Optional[BaseTransform]:
        return self._transforms.get(refactor_type)

    def get_capabilities(self) -> RefactorCapabilities:
        """Get refactoring capabilities.

        Returns:
            RefactorCapabilities describing available operations
        """
        return RefactorCapabilities(
            supported_refactors=list(self._transforms.keys()),
            supported_languages=["c_sharp"],
            supports_preview=True,
            supports_undo=True,
            supports_cross_file=False,
        )

    def get_analyzer(self, language: str) -> Optional[BaseCodeAnalyzer]:
        """Get or create an analyzer for a language.

        Args:
            language: Language identifier

        Returns:
            Analyzer instance or None
        """
        if language not in self._analyzers:
            analyzer = get_analyzer(language)
            if analyzer:
                self._analyzers[language] = analyzer
        return self._analyzers.get(language)

    def preview(
        self,
        refactor_type: RefactorType,
        target_file: Path,
        line: int,
        column: int,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorPreview:
        """Generate a preview of a refactoring operation.

        Args:
            refactor_type: Type of refactoring
            target_file: File containing target code
            line: 1-based line of the cursor
            column: 0-based column of the cursor
            cancellation: Optional cancellation token

        Returns:
            RefactorPreview with proposed changes
        """
        request = self._build_request(refactor_type, target_file, line, column)
        return self.preview_request(request, cancellation)

    def preview_request(
        self,
        request: RefactorRequest,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorPreview:
        """Generate preview from a RefactorRequest.

        Args:
            request: Refactor request
            cancellation: Optional cancellation token

        Returns:
            RefactorPreview
        """
        preview = RefactorPreview(request=request)

        transform = self._transforms.get(request.refactor_type)
        if transform is None:
            preview.errors.append(f"No transform available for {request.refactor_type}")
            return preview

        language = self._detect_language(request.target.file_path)
        analyzer = self.get_analyzer(language)
        if analyzer is None:
            preview.errors.append(f"No analyzer available for language: {language}")
            return preview

        sources = self._load_sources(request.target.file_path)
        if not sources:
            preview.errors.append("Failed to load source files")
            return preview

        return transform.preview(request, sources, analyzer, cancellation)

    def render_preview(self, preview: RefactorPreview) -> dict[Path, tuple[str, str]]:
        """Old and new source for every file a preview touches.

        Returns:
            Dict mapping file paths to ``(old_source, new_source)``
        """
        transform = self._transforms.get(preview.request.refactor_type)
        if transform is None or not preview.has_changes:
            return {}

        sources = self._load_sources(preview.request.target.file_path)
        rendered = transform.render(preview, sources)
        return {path: (sources[path], new_source) for path, new_source in rendered.items()}

    def apply(
        self,
        request: RefactorRequest,
        create_backup: Optional[bool] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorResult:
        """Apply a refactoring operation.

        Args:
            request: Refactor request
            create_backup: Whether to create backups; settings decide when omitted
            cancellation: Optional cancellation token

        Returns:
            RefactorResult
        """
        if create_backup is None:
            create_backup = self.settings.create_backups

        preview = self.preview_request(request, cancellation)

        if not preview.is_valid:
            return RefactorResult(
                request=request,
                success=False,
                warnings=list(preview.warnings),
                error_message="; ".join(preview.errors),
            )

        if not preview.has_changes:
            return RefactorResult(request=request, success=True, warnings=list(preview.warnings))

        backup_paths = []
        if create_backup:
            backup_paths = self._create_backups(preview.affected_files)

        transform = self._transforms[request.refactor_type]
        analyzer = self.get_analyzer(self._detect_language(request.target.file_path))
        sources = self._load_sources(request.target.file_path)

        result = transform.apply(request, sources, analyzer, cancellation)
        result.backup_paths = backup_paths

        if result.success:
            logger.info(
                f"Applied {request.refactor_type.value} to {request.target.file_path} "
                f"({result.edits_applied} edit(s))"
            )
        return result

    def undo(self, result: RefactorResult) -> bool:
        """Undo a refactoring operation.

        Args:
            result: Result to undo

        Returns:
            True if undo succeeded
        """
        if not result.can_undo():
            logger.warning("Cannot undo: no backups available")
            return False

        try:
            for backup_path in result.backup_paths:
                # Backup format: original_name.backup_timestamp.ext
                original_name = backup_path.stem.rsplit(".backup_", 1)[0]

                for modified in result.files_modified:
                    if modified.stem == original_name:
                        shutil.copy(backup_path, modified)
                        break

            logger.info(f"Restored {len(result.backup_paths)} file(s) from backup")
            return True

        except OSError as e:
            logger.error(f"Undo failed: {e}")
            return False

    def suggest_refactorings(
        self,
        file_path: Path,
    ) -> list[RefactorSuggestion]:
        """Suggest potential refactorings for a file.

        Args:
            file_path: Path to analyze

        Returns:
            List of suggestions
        """
        analyzer = self.get_analyzer(self._detect_language(file_path))
        if analyzer is None:
            return []

        try:
            source = read_source(file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to analyze {file_path}: {e}")
            return []

        suggestions = analyzer.suggest_refactorings(source, file_path)
        for suggestion in suggestions:
            transform = self._transforms.get(suggestion.refactor_type)
            if transform is not None:
                suggestion.risk = transform.risk_level
        return suggestions

    def suggest_refactorings_for_project(
        self,
        max_files: int = 100,
    ) -> dict[Path, list[RefactorSuggestion]]:
        """Suggest refactorings for all C# files in the project.

        Args:
            max_files: Maximum files to analyze

        Returns:
            Dict mapping files to suggestions
        """
        suggestions: dict[Path, list[RefactorSuggestion]] = {}
        files_processed = 0

        for file_path in sorted(self.project_root.rglob("*.cs")):
            if files_processed >= max_files:
                break

            if any(part in file_path.parts for part in _SKIPPED_DIRECTORIES):
                continue

            file_suggestions = self.suggest_refactorings(file_path)
            if file_suggestions:
                suggestions[file_path] = file_suggestions

            files_processed += 1

        return suggestions

    def generate_dependency_constructor(
        self,
        file_path: Path,
        line: int,
        column: int,
    ) -> RefactorResult:
        """Convenience method to create or extend the dependency constructor.

        Args:
            file_path: File containing the class
            line: Line of the class or constructor declaration
            column: Column within that line

        Returns:
            RefactorResult
        """
        request = self._build_request(
            RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, file_path, line, column
        )
        return self.apply(request)

    def convert_method(
        self,
        file_path: Path,
        line: int,
        column: int,
        mode: MethodMode,
    ) -> RefactorResult:
        """Convenience method to convert a method to sync or async.

        Args:
            file_path: File containing the method
            line: Line within the method
            column: Column within that line
            mode: Target mode

        Returns:
            RefactorResult
        """
        refactor_type = (
            RefactorType.CONVERT_TO_SYNC if mode is MethodMode.SYNC else RefactorType.CONVERT_TO_ASYNC
        )
        request = self._build_request(refactor_type, file_path, line, column)
        return self.apply(request)

    def _build_request(
        self,
        refactor_type: RefactorType,
        file_path: Path,
        line: int,
        column: int,
    ) -> RefactorRequest:
        return RefactorRequest(
            refactor_type=refactor_type,
            target=SourceLocation(
                file_path=file_path,
                start_line=line,
                start_column=column,
                end_line=line,
                end_column=column,
            ),
        )

    def _detect_language(self, file_path: Path) -> str:
        """Detect language from file path."""
        ext_map = {
            ".cs": "c_sharp",
            ".csx": "c_sharp",
        }
        return ext_map.get(file_path.suffix.lower(), "c_sharp")

    def _load_sources(self, target_file: Path) -> dict[Path, str]:
        """Load the target file.

        Args:
            target_file: Primary target file

        Returns:
            Dict mapping paths to source content
        """
        sources: dict[Path, str] = {}
        try:
            sources[target_file] = read_source(target_file)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {target_file}: {e}")
        return sources

    def _create_backups(self, files: list[Path]) -> list[Path]:
        """Create backups of files.

        Args:
            files: Files to back up

        Returns:
            List of backup paths
        """
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_paths = []

        for file_path in files:
            backup_name = f"{file_path.stem}.backup_{timestamp}{file_path.suffix}"
            backup_path = self.backup_dir / backup_name

            try:
                shutil.copy(file_path, backup_path)
                backup_paths.append(backup_path)
            except OSError as e:
                logger.warning(f"Failed to backup {file_path}: {e}")

        return backup_paths


# Global manager singleton
_refactor_manager: Optional[RefactorManager] = None


def get_refactor_manager(
    project_root: Optional[Path] = None,
) -> RefactorManager:
    """Get the global refactor manager.

    Args:
        project_root: Project root directory

    Returns:
        RefactorManager instance
    """
    global _refactor_manager
    if _refactor_manager is None or (
        project_root and _refactor_manager.project_root != project_root
    ):
        _refactor_manager = RefactorManager(project_root=project_root)
    return _refactor_manager


def reset_refactor_manager() -> None:
    """Reset the global refactor manager."""
    global _refactor_manager
    _refactor_manager = None
