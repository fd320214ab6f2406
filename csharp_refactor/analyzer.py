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

"""Code analyzer for refactoring operations.

Parses source into the tree model and locates the node a refactoring
applies to: the class (or one of its constructors) or the method under a
cursor position.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from csharp_refactor.dependency_constructor import collect_candidates, is_applicable
from csharp_refactor.protocol import (
    RefactorRisk,
    RefactorSuggestion,
    RefactorType,
)
from csharp_refactor.syntax.nodes import ClassNode, ConstructorMember, MethodMember
from csharp_refactor.syntax.parser import CSharpDocument, parse_document

logger = logging.getLogger(__name__)


class BaseCodeAnalyzer(ABC):
    """Abstract base class for code analyzers."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Language this analyzer supports."""
        ...

    @abstractmethod
    def parse(self, source: str, file_path: Path) -> Optional[CSharpDocument]:
        """Parse source code into a document."""
        ...

    @abstractmethod
    def find_class_at(
        self,
        document: CSharpDocument,
        line: int,
        column: int,
    ) -> Optional[ClassNode]:
        """Find the class a constructor refactoring applies to."""
        ...

    @abstractmethod
    def find_method_at(
        self,
        document: CSharpDocument,
        line: int,
        column: int,
    ) -> Optional[MethodMember]:
        """Find the method under a position."""
        ...

    def suggest_refactorings(
        self,
        source: str,
        file_path: Path,
    ) -> list[RefactorSuggestion]:
        """Suggest potential refactorings."""
        return []


class CSharpAnalyzer(BaseCodeAnalyzer):
    """Code analyzer for C# using the tree-sitter grammar."""

    @property
    def language(self) -> str:
        return "c_sharp"

    def parse(self, source: str, file_path: Path) -> Optional[CSharpDocument]:
        """Parse C# source code."""
        document = parse_document(source)
        if document.has_errors:
            logger.warning(f"Failed to parse {file_path}: source contains syntax errors")
            return None
        return document

    def find_class_at(
        self,
        document: CSharpDocument,
        line: int,
        column: int,
    ) -> Optional[ClassNode]:
        """Find the class whose declaration or constructor is under a position.

        Positions inside any other member (fields, methods, properties...)
        do not select the class.
        """
        offset = document.offset_of(line, column)

        containing = [
            class_node
            for class_node in document.classes
            if class_node.span is not None and class_node.span.contains(offset)
        ]
        if not containing:
            return None

        # Innermost class wins
        class_node = min(containing, key=lambda c: c.span.length)

        for member in class_node.members:
            if member.span is None or not member.span.contains(offset):
                continue
            if isinstance(member, ConstructorMember):
                return class_node
            return None

        return class_node

    def find_method_at(
        self,
        document: CSharpDocument,
        line: int,
        column: int,
    ) -> Optional[MethodMember]:
        """Find the innermost method declaration containing a position.

        Methods of structs, interfaces and records are found as well as those
        of classes.
        """
        offset = document.offset_of(line, column)

        found: Optional[MethodMember] = None
        for type_node in document.types:
            for method in type_node.methods:
                if method.span is None or not method.span.contains(offset):
                    continue
                if found is None or method.span.length < found.span.length:
                    found = method
        return found

    def suggest_refactorings(
        self,
        source: str,
        file_path: Path,
    ) -> list[RefactorSuggestion]:
        """Suggest a dependency constructor for every class that needs one."""
        document = self.parse(source, file_path)
        if document is None:
            return []

        suggestions = []
        for class_node in document.classes:
            if not is_applicable(class_node):
                continue
            count = len(collect_candidates(class_node))
            suggestions.append(
                RefactorSuggestion(
                    refactor_type=RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR,
                    target=document.location_of(
                        file_path, class_node.span.start, class_node.span.end
                    ),
                    reason=f"Class '{class_node.name}' has unassigned dependencies "
                    f"({count} read-only field(s))",
                    confidence=0.9,
                    risk=RefactorRisk.MEDIUM,
                    auto_fixable=True,
                )
            )

        return suggestions


# Registry of analyzers
ANALYZERS: dict[str, type[BaseCodeAnalyzer]] = {
    "c_sharp": CSharpAnalyzer,
    "csharp": CSharpAnalyzer,
}


def get_analyzer(language: str) -> Optional[BaseCodeAnalyzer]:
    """Get an analyzer for a language.

    Args:
        language: Language identifier

    Returns:
        Analyzer instance or None
    """
    analyzer_class = ANALYZERS.get(language.lower())
    if analyzer_class:
        return analyzer_class()
    return None
