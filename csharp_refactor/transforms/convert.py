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

"""Method signature conversion transforms."""

from pathlib import Path
from typing import Optional

from csharp_refactor.analyzer import BaseCodeAnalyzer
from csharp_refactor.method_mode import ASYNC_MODIFIER, convert_method_mode
from csharp_refactor.protocol import (
    CancellationToken,
    MethodMode,
    RefactorPreview,
    RefactorRequest,
    RefactorRisk,
    RefactorType,
    is_cancelled,
)
from csharp_refactor.syntax.splice import SpliceError, method_edits
from csharp_refactor.transforms.base import BaseTransform


class _ConvertMethodModeTransform(BaseTransform):
    """Shared preview logic for the sync and async conversions."""

    mode: MethodMode

    @property
    def risk_level(self) -> RefactorRisk:
        # The body is not rewritten to match the new signature
        return RefactorRisk.HIGH

    def preview(
        self,
        request: RefactorRequest,
        sources: dict[Path, str],
        analyzer: BaseCodeAnalyzer,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorPreview:
        """Generate method conversion preview."""
        preview = RefactorPreview(
            request=request,
            risk=self.risk_level,
        )

        document = self._load_document(preview, sources, analyzer)
        if document is None:
            return preview

        target_file = request.target.file_path
        method = analyzer.find_method_at(
            document,
            request.target.start_line,
            request.target.start_column,
        )
        if method is None:
            preview.errors.append("No method found at target location")
            return preview

        if is_cancelled(cancellation):
            preview.errors.append("Refactoring was cancelled")
            return preview

        if self.mode is MethodMode.ASYNC and method.has_modifier(ASYNC_MODIFIER):
            preview.warnings.append(f"Method '{method.name}' is already async")

        converted = convert_method_mode(method, self.mode, cancellation, self.settings)

        try:
            edits = method_edits(document, target_file, method, converted)
        except SpliceError as e:
            preview.errors.append(str(e))
            return preview

        preview.edits.extend(edits)
        if edits:
            preview.affected_files.append(target_file)
        else:
            preview.warnings.append(f"Method '{method.name}' is already {self.mode.value}")

        return preview


class ConvertToSyncTransform(_ConvertMethodModeTransform):
    """Transform ``async Task<T> M()`` into ``T M()``."""

    mode = MethodMode.SYNC

    @property
    def refactor_type(self) -> RefactorType:
        return RefactorType.CONVERT_TO_SYNC


class ConvertToAsyncTransform(_ConvertMethodModeTransform):
    """Transform ``T M()`` into ``async Task<T> M()``."""

    mode = MethodMode.ASYNC

    @property
    def refactor_type(self) -> RefactorType:
        return RefactorType.CONVERT_TO_ASYNC
