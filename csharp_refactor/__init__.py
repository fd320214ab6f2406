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

"""Syntax-tree refactorings for C# classes and methods.

Two transformations are provided: generating a dependency constructor that
injects every readonly field, and converting a method between an
``async Task<T>`` signature and a plain ``T`` one.

Example usage:
    from csharp_refactor import (
        MethodMode,
        convert_method_mode,
        is_applicable,
        parse_class,
        parse_method,
        synthesize,
    )

    # Work on the tree model directly
    class_node = parse_class(source)
    if is_applicable(class_node):
        class_node = synthesize(class_node)

    method = convert_method_mode(parse_method(source, "Load"), MethodMode.SYNC)

    # Or let the manager edit files in place
    from csharp_refactor import get_refactor_manager
    from pathlib import Path

    manager = get_refactor_manager()
    result = manager.generate_dependency_constructor(Path("Service.cs"), line=3, column=4)
    if result.success and result.can_undo():
        manager.undo(result)
"""

from csharp_refactor.protocol import (
    CancellationToken,
    CodeEdit,
    MethodMode,
    RefactorCapabilities,
    RefactorPreview,
    RefactorRequest,
    RefactorResult,
    RefactorRisk,
    RefactorSuggestion,
    RefactorType,
    SourceLocation,
)
from csharp_refactor.config import (
    RefactorSettings,
    get_settings,
    load_settings,
    reset_settings,
)
from csharp_refactor.syntax import (
    ClassNode,
    MethodMember,
    parse_class,
    parse_document,
    parse_method,
)
from csharp_refactor.dependency_constructor import (
    DependencyCandidate,
    derive_parameter_name,
    is_applicable,
    is_dependency_constructor_applicable,
    synthesize,
    synthesize_dependency_constructor,
)
from csharp_refactor.method_mode import convert_method_mode, to_async, to_sync
from csharp_refactor.analyzer import BaseCodeAnalyzer, CSharpAnalyzer, get_analyzer
from csharp_refactor.transforms import (
    BaseTransform,
    ConvertToAsyncTransform,
    ConvertToSyncTransform,
    GenerateDependencyConstructorTransform,
)
from csharp_refactor.manager import (
    RefactorManager,
    get_refactor_manager,
    reset_refactor_manager,
)

__all__ = [
    # Protocol types
    "CancellationToken",
    "CodeEdit",
    "MethodMode",
    "RefactorCapabilities",
    "RefactorPreview",
    "RefactorRequest",
    "RefactorResult",
    "RefactorRisk",
    "RefactorSuggestion",
    "RefactorType",
    "SourceLocation",
    # Settings
    "RefactorSettings",
    "get_settings",
    "load_settings",
    "reset_settings",
    # Tree model
    "ClassNode",
    "MethodMember",
    "parse_class",
    "parse_document",
    "parse_method",
    # Dependency constructor
    "DependencyCandidate",
    "derive_parameter_name",
    "is_applicable",
    "is_dependency_constructor_applicable",
    "synthesize",
    "synthesize_dependency_constructor",
    # Method mode
    "convert_method_mode",
    "to_async",
    "to_sync",
    # Analyzers
    "BaseCodeAnalyzer",
    "CSharpAnalyzer",
    "get_analyzer",
    # Transforms
    "BaseTransform",
    "ConvertToAsyncTransform",
    "ConvertToSyncTransform",
    "GenerateDependencyConstructorTransform",
    # Manager
    "RefactorManager",
    "get_refactor_manager",
    "reset_refactor_manager",
]
