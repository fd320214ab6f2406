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

"""Render synthesized model nodes as C# text."""

from typing import Iterable

from csharp_refactor.syntax.nodes import (
    ClassNode,
    ConstructorMember,
    FieldMember,
    Member,
    MethodMember,
    Modifier,
    OpaqueMember,
    Parameter,
    Statement,
)


def render_modifiers(modifiers: Iterable[Modifier]) -> str:
    return " ".join(modifier.keyword for modifier in modifiers)


def render_parameters(parameters: Iterable[Parameter]) -> str:
    return ", ".join(parameter.render() for parameter in parameters)


def render_statements(
    statements: Iterable[Statement],
    indent: str,
    newline: str = "\n",
) -> str:
    """Render statements one per line, each line terminated by ``newline``."""
    return "".join(f"{indent}{statement.render()}{newline}" for statement in statements)


def render_constructor(
    constructor: ConstructorMember,
    indent: str,
    indent_unit: str = "    ",
    newline: str = "\n",
) -> str:
    """Render a constructor declaration with its block body.

    Args:
        constructor: Constructor to render
        indent: Indentation of the declaration line
        indent_unit: One level of indentation for the body
        newline: Line terminator
    """
    header = f"{constructor.name}({render_parameters(constructor.parameters)})"
    modifiers = render_modifiers(constructor.modifiers)
    if modifiers:
        header = f"{modifiers} {header}"

    body = render_statements(constructor.body or (), indent + indent_unit, newline)
    return f"{indent}{header}{newline}{indent}{{{newline}{body}{indent}}}{newline}"


def render_member(member: Member, indent: str = "", indent_unit: str = "    ") -> str:
    """Render a member in a compact, normalized form."""
    if isinstance(member, FieldMember):
        prefix = render_modifiers(member.modifiers)
        declaration = f"{member.type.render()} {', '.join(member.names)};"
        return f"{indent}{prefix} {declaration}" if prefix else f"{indent}{declaration}"
    if isinstance(member, ConstructorMember):
        return render_constructor(member, indent, indent_unit).rstrip("\n")
    if isinstance(member, MethodMember):
        return indent + render_method_signature(member)
    if isinstance(member, OpaqueMember):
        return indent + member.normalized
    raise TypeError(f"Unsupported member: {type(member).__name__}")


def render_method_signature(method: MethodMember) -> str:
    signature = f"{method.return_type.render()} {method.name}({render_parameters(method.parameters)})"
    modifiers = render_modifiers(method.modifiers)
    return f"{modifiers} {signature}" if modifiers else signature


def render_class_outline(class_node: ClassNode, indent_unit: str = "    ") -> str:
    """Render a readable outline of a class, mostly for logs and debugging."""
    lines = [f"class {class_node.name}", "{"]
    for member in class_node.members:
        lines.append(render_member(member, indent_unit, indent_unit))
    lines.append("}")
    return "\n".join(lines)
