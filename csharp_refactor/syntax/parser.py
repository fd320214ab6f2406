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

"""Build the immutable tree model from a tree-sitter C# parse.

Only the shapes the transforms care about are modelled (fields,
constructors, methods, simple assignments). Everything else becomes an
opaque node carrying its original text.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from csharp_refactor.protocol import SourceLocation
from csharp_refactor.syntax.grammar import parse_tree
from csharp_refactor.syntax.nodes import (
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
    normalize_text,
)

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)

# Extras that may appear anywhere and are trivia for our purposes
_TRIVIA_TYPES = {"comment"}

# Declarations whose methods are modelled, by tree-sitter node type
_TYPE_DECLARATIONS = {
    "class_declaration": "class",
    "struct_declaration": "struct",
    "interface_declaration": "interface",
    "record_declaration": "record",
    "record_struct_declaration": "record",
}


def _is_trivia(node: "Node") -> bool:
    return node.type in _TRIVIA_TYPES or node.type.startswith("preproc")


@dataclass
class CSharpDocument:
    """A parsed C# source file.

    ``types`` lists every class, struct, interface and record declaration in
    the file, outer declarations before the ones nested in them.
    """

    source: str
    types: list[ClassNode] = field(default_factory=list)
    has_errors: bool = False

    @property
    def classes(self) -> list[ClassNode]:
        return [type_node for type_node in self.types if type_node.kind == "class"]

    @property
    def newline(self) -> str:
        return "\r\n" if "\r\n" in self.source else "\n"

    def offset_of(self, line: int, column: int) -> int:
        """Convert a 1-based line and 0-based column to a character offset."""
        lines = self.source.split("\n")
        line_index = min(max(line, 1), len(lines)) - 1
        offset = sum(len(text) + 1 for text in lines[:line_index])
        return offset + min(max(column, 0), len(lines[line_index]))

    def location_of(self, file_path: Path, start: int, end: Optional[int] = None) -> SourceLocation:
        """Convert character offsets to a SourceLocation."""
        if end is None:
            end = start
        start_line, start_column = self._line_column(start)
        end_line, end_column = self._line_column(end)
        return SourceLocation(
            file_path=file_path,
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
        )

    def _line_column(self, offset: int) -> tuple[int, int]:
        line = self.source.count("\n", 0, offset) + 1
        line_start = self.source.rfind("\n", 0, offset) + 1
        return line, offset - line_start

    def indent_at(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""
        line_start = self.source.rfind("\n", 0, offset) + 1
        line = self.source[line_start:]
        return line[: len(line) - len(line.lstrip(" \t"))]

    def is_line_blank_before(self, offset: int) -> bool:
        """True if only whitespace precedes ``offset`` on its line."""
        line_start = self.source.rfind("\n", 0, offset) + 1
        return self.source[line_start:offset].strip() == ""


class _OffsetMap:
    """Map tree-sitter byte offsets to character offsets."""

    def __init__(self, source: str):
        self._encoded = source.encode("utf-8")
        self._ascii = len(self._encoded) == len(source)

    def char(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self._encoded[:byte_offset].decode("utf-8", errors="ignore"))


class _ModelBuilder:
    """Translate tree-sitter nodes into model nodes for one source text."""

    def __init__(self, source: str):
        self.source = source
        self._offsets = _OffsetMap(source)

    def span(self, node: "Node") -> SourceSpan:
        return SourceSpan(self._offsets.char(node.start_byte), self._offsets.char(node.end_byte))

    def text(self, node: "Node") -> str:
        span = self.span(node)
        return self.source[span.start : span.end]

    # Declarations

    def class_node(self, node: "Node") -> ClassNode:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body") or _first_child(node, "declaration_list")

        members: list[Member] = []
        if body is not None:
            for child in body.named_children:
                if _is_trivia(child):
                    continue
                members.append(self.member(child))

        return ClassNode(
            name=self.text(name_node) if name_node is not None else "",
            members=tuple(members),
            kind=_TYPE_DECLARATIONS.get(node.type, "class"),
            span=self.span(node),
            body_span=self.span(body) if body is not None else None,
        )

    def member(self, node: "Node") -> Member:
        if node.type == "field_declaration":
            return self.field_member(node)
        if node.type == "constructor_declaration":
            return self.constructor(node)
        if node.type == "method_declaration":
            return self.method(node)
        return OpaqueMember(
            kind=node.type,
            normalized=normalize_text(self.text(node)),
            span=self.span(node),
        )

    def modifiers(self, node: "Node") -> tuple[Modifier, ...]:
        return tuple(
            Modifier(keyword=self.text(child), span=self.span(child))
            for child in node.children
            if child.type == "modifier"
        )

    def field_member(self, node: "Node") -> FieldMember:
        declaration = _first_child(node, "variable_declaration")
        type_node = declaration.child_by_field_name("type") if declaration else None
        names = []
        if declaration is not None:
            for child in declaration.named_children:
                if child.type == "variable_declarator":
                    name_node = child.child_by_field_name("name") or _first_child(
                        child, "identifier"
                    )
                    if name_node is not None:
                        names.append(self.text(name_node))

        return FieldMember(
            type=self.type_ref(type_node) if type_node is not None else TypeRef(""),
            modifiers=self.modifiers(node),
            names=tuple(names),
            span=self.span(node),
        )

    def constructor(self, node: "Node") -> ConstructorMember:
        name_node = node.child_by_field_name("name")
        parameter_list = node.child_by_field_name("parameters") or _first_child(
            node, "parameter_list"
        )
        body = node.child_by_field_name("body")
        if body is None or body.type != "block":
            body = None

        return ConstructorMember(
            name=self.text(name_node) if name_node is not None else "",
            modifiers=self.modifiers(node),
            parameters=self.parameters(parameter_list),
            body=self.statements(body) if body is not None else None,
            span=self.span(node),
            parameter_list_span=self.span(parameter_list) if parameter_list is not None else None,
            body_span=self.span(body) if body is not None else None,
        )

    def method(self, node: "Node") -> MethodMember:
        name_node = node.child_by_field_name("name")
        # "returns" in current grammars, "type" in older ones
        return_node = node.child_by_field_name("returns") or node.child_by_field_name("type")
        parameter_list = node.child_by_field_name("parameters") or _first_child(
            node, "parameter_list"
        )
        body = node.child_by_field_name("body")
        if body is None or body.type != "block":
            body = None

        return MethodMember(
            name=self.text(name_node) if name_node is not None else "",
            return_type=self.type_ref(return_node) if return_node is not None else TypeRef(""),
            modifiers=self.modifiers(node),
            parameters=self.parameters(parameter_list),
            body=self.statements(body) if body is not None else None,
            span=self.span(node),
        )

    def parameters(self, parameter_list: Optional["Node"]) -> tuple[Parameter, ...]:
        if parameter_list is None:
            return ()
        parameters = []
        for child in parameter_list.named_children:
            if child.type != "parameter":
                continue
            name_node = child.child_by_field_name("name")
            type_node = child.child_by_field_name("type")
            parameters.append(
                Parameter(
                    name=self.text(name_node) if name_node is not None else "",
                    type=self.type_ref(type_node) if type_node is not None else TypeRef(""),
                    span=self.span(child),
                )
            )
        return tuple(parameters)

    # Statements

    def statements(self, block: "Node") -> tuple[Statement, ...]:
        return tuple(
            self.statement(child) for child in block.named_children if not _is_trivia(child)
        )

    def statement(self, node: "Node") -> Statement:
        if node.type == "expression_statement":
            assignment = self._simple_assignment(node)
            if assignment is not None:
                return assignment

        text = self.text(node)
        return OpaqueStatement(
            kind=node.type,
            normalized=normalize_text(text),
            text=text,
            span=self.span(node),
        )

    def _simple_assignment(self, node: "Node") -> Optional[AssignmentStatement]:
        expressions = [child for child in node.named_children if not _is_trivia(child)]
        if len(expressions) != 1 or expressions[0].type != "assignment_expression":
            return None

        expression = expressions[0]
        left = expression.child_by_field_name("left")
        right = expression.child_by_field_name("right")
        if left is None or right is None:
            return None
        if left.type != "identifier" or right.type != "identifier":
            return None

        operator = self.source[self.span(left).end : self.span(right).start].strip()
        if operator != "=":
            return None

        return AssignmentStatement(
            target=self.text(left),
            value=self.text(right),
            span=self.span(node),
        )

    # Types

    def type_ref(self, node: "Node") -> TypeRef:
        text = self.text(node)

        if node.type == "generic_name":
            name_node = node.child_by_field_name("name") or _first_child(node, "identifier")
            argument_list = _first_child(node, "type_argument_list")
            arguments = ()
            if argument_list is not None:
                arguments = tuple(
                    self.type_ref(child)
                    for child in argument_list.named_children
                    if not _is_trivia(child)
                )
            name = self.text(name_node) if name_node is not None else text.split("<", 1)[0]
            return TypeRef(
                name=_strip_whitespace(name),
                arguments=arguments,
                text=text,
                span=self.span(node),
            )

        if node.type == "qualified_name":
            qualifier = node.child_by_field_name("qualifier")
            right = node.child_by_field_name("name")
            if qualifier is not None and right is not None and right.type == "generic_name":
                inner = self.type_ref(right)
                return TypeRef(
                    name=f"{_strip_whitespace(self.text(qualifier))}.{inner.name}",
                    arguments=inner.arguments,
                    text=text,
                    span=self.span(node),
                )

        return TypeRef(name=_strip_whitespace(text), text=text, span=self.span(node))


def _first_child(node: "Node", node_type: str) -> Optional["Node"]:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _strip_whitespace(text: str) -> str:
    return "".join(text.split())


def _collect_types(node: "Node", builder: _ModelBuilder, types: list[ClassNode]) -> None:
    for child in node.named_children:
        if child.type in _TYPE_DECLARATIONS:
            types.append(builder.class_node(child))
        _collect_types(child, builder, types)


def parse_document(source: str) -> CSharpDocument:
    """Parse C# source text into a CSharpDocument.

    Args:
        source: C# source code

    Returns:
        Document with every type declaration converted to a ClassNode
    """
    tree = parse_tree(source)
    builder = _ModelBuilder(source)

    types: list[ClassNode] = []
    _collect_types(tree.root_node, builder, types)

    logger.debug(f"Parsed {len(types)} type declaration(s)")
    return CSharpDocument(
        source=source,
        types=types,
        has_errors=tree.root_node.has_error,
    )


def parse_class(source: str, name: Optional[str] = None) -> ClassNode:
    """Parse source and return a single class declaration.

    Args:
        source: C# source code
        name: Class name to select; the first class when omitted

    Raises:
        ValueError: If no matching class is declared in the source
    """
    document = parse_document(source)
    for class_node in document.classes:
        if name is None or class_node.name == name:
            return class_node
    raise ValueError(f"No class declaration{f' named {name!r}' if name else ''} found")


def parse_method(source: str, name: str) -> MethodMember:
    """Parse source and return the first method called ``name``.

    Raises:
        ValueError: If no such method is declared in the source
    """
    document = parse_document(source)
    for type_node in document.types:
        for method in type_node.methods:
            if method.name == name:
                return method
    raise ValueError(f"No method named {name!r} found")
