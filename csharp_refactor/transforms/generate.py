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

"""Generate refactoring transforms."""

import logging
from pathlib import Path
from typing import Optional

from csharp_refactor.analyzer import BaseCodeAnalyzer
from csharp_refactor.dependency_constructor import (
    collect_candidates,
    find_parameter_collisions,
    is_applicable,
    synthesize,
)
from csharp_refactor.protocol import (
    CancellationToken,
    RefactorPreview,
    RefactorRequest,
    RefactorRisk,
    RefactorType,
    is_cancelled,
)
from csharp_refactor.syntax.printer import render_class_outline
from csharp_refactor.syntax.splice import SpliceError, class_edits
from csharp_refactor.transforms.base import BaseTransform

logger = logging.getLogger(__name__)


class GenerateDependencyConstructorTransform(BaseTransform):
    """Transform that wires every read-only field through the constructor."""

    @property
    def refactor_type(self) -> RefactorType:
        return RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR

    @property
    def risk_level(self) -> RefactorRisk:
        # Callers constructing the class must pass the new arguments
        return RefactorRisk.MEDIUM

    def preview(
        self,
        request: RefactorRequest,
        sources: dict[Path, str],
        analyzer: BaseCodeAnalyzer,
        cancellation: Optional[CancellationToken] = None,
    ) -> RefactorPreview:
        """Generate dependency constructor preview."""
        preview = RefactorPreview(
            request=request,
            risk=self.risk_level,
        )

        document = self._load_document(preview, sources, analyzer)
        if document is None:
            return preview

        target_file = request.target.file_path
        class_node = analyzer.find_class_at(
            document,
            request.target.start_line,
            request.target.start_column,
        )
        if class_node is None:
            preview.errors.append("No class or constructor found at target location")
            return preview

        if is_cancelled(cancellation):
            preview.errors.append("Refactoring was cancelled")
            return preview

        if not is_applicable(class_node):
            preview.warnings.append(f"Class '{class_node.name}' has no unassigned dependencies")
            return preview

        if self.settings.warn_on_parameter_collisions:
            collisions = find_parameter_collisions(collect_candidates(class_node))
            for parameter_name, field_names in collisions.items():
                message = (
                    f"Fields {', '.join(field_names)} all map to parameter '{parameter_name}'"
                )
                logger.warning(f"{class_node.name}: {message}")
                preview.warnings.append(message)

        updated = synthesize(class_node, cancellation)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Synthesized:\n{render_class_outline(updated, self.settings.indent)}")

        try:
            edits = class_edits(document, target_file, class_node, updated, self.settings.indent)
        except SpliceError as e:
            preview.errors.append(str(e))
            return preview

        preview.edits.extend(edits)
        if edits:
            preview.affected_files.append(target_file)

        return preview
