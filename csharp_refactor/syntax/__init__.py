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

"""C# syntax tree model, tree-sitter parsing and source splicing."""

from csharp_refactor.syntax.nodes import (
    VOID,
    AssignmentStatement,
    ClassNode,
    ConstructorMember,
    FieldMember,
    Member,
    MethodMember,
    Modifier,
    OpaqueMember,
    OpaqueStatement,
    Parameter,
    SourceSpan,
    Statement,
    TypeRef,
)
from csharp_refactor.syntax.parser import (
    CSharpDocument,
    parse_class,
    parse_document,
    parse_method,
)
from csharp_refactor.syntax.splice import SpliceError, class_edits, method_edits

__all__ = [
    # Model
    "VOID",
    "AssignmentStatement",
    "ClassNode",
    "ConstructorMember",
    "FieldMember",
    "Member",
    "MethodMember",
    "Modifier",
    "OpaqueMember",
    "OpaqueStatement",
    "Parameter",
    "SourceSpan",
    "Statement",
    "TypeRef",
    # Parsing
    "CSharpDocument",
    "parse_class",
    "parse_document",
    "parse_method",
    # Splicing
    "SpliceError",
    "class_edits",
    "method_edits",
]
