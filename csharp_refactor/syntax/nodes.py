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

"""Immutable syntax tree model for C# classes and their members.

Nodes are frozen value objects. Equality is structural: source spans and
original text are carried for splicing but excluded from comparison, so two
nodes that differ only in formatting compare equal.

Nodes built by the parser carry spans; nodes synthesized by a transform
have ``span=None``.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Union

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs so formatting does not affect equality."""
    return _WHITESPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class SourceSpan:
    """Character offsets ``[start, end)`` into the parsed source."""

    start: int
    end: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class TypeRef:
    """A type reference such as ``string``, ``Task`` or ``Task<List<int>>``.

    ``name`` holds the (possibly qualified) type name without whitespace and
    ``arguments`` the generic type arguments. Array, nullable and tuple types
    are kept as a single opaque ``name``.
    """

    name: str
    arguments: tuple["TypeRef", ...] = ()
    text: Optional[str] = field(default=None, compare=False)
    span: Optional[SourceSpan] = field(default=None, compare=False)

    @property
    def simple_name(self) -> str:
        """Last segment of a qualified name (``System.String`` -> ``String``)."""
        return self.name.rsplit(".", 1)[-1].rsplit("::", 1)[-1]

    @property
    def is_void(self) -> bool:
        return self.name == "void" and not self.arguments

    def render(self) -> str:
        if self.text is not None:
            return self.text
        if not self.arguments:
            return self.name
        inner = ", ".join(argument.render() for argument in self.arguments)
        return f"{self.name}<{inner}>"

    def __str__(self) -> str:
        return self.render()


VOID = TypeRef("void")


@dataclass(frozen=True)
class Modifier:
    """A single declaration modifier keyword (``public``, ``readonly``, ``async``...)."""

    keyword: str
    span: Optional[SourceSpan] = field(default=None, compare=False)


@dataclass(frozen=True)
class Parameter:
    """A formal parameter. Matched against fields by name only."""

    name: str
    type: TypeRef
    span: Optional[SourceSpan] = field(default=None, compare=False)

    def render(self) -> str:
        return f"{self.type.render()} {self.name}"


@dataclass(frozen=True)
class AssignmentStatement:
    """A statement of the exact shape ``target = value;`` with both sides identifiers."""

    target: str
    value: str
    span: Optional[SourceSpan] = field(default=None, compare=False)

    def render(self) -> str:
        return f"{self.target} = {self.value};"


@dataclass(frozen=True)
class OpaqueStatement:
    """Any other statement; preserved verbatim, never interpreted."""

    kind: str
    normalized: str
    text: str = field(default="", compare=False)
    span: Optional[SourceSpan] = field(default=None, compare=False)

    def render(self) -> str:
        return self.text


Statement = Union[AssignmentStatement, OpaqueStatement]


def _has_modifier(modifiers: tuple[Modifier, ...], keyword: str) -> bool:
    return any(modifier.keyword == keyword for modifier in modifiers)


@dataclass(frozen=True)
class FieldMember:
    """A field declaration; one declaration may introduce several variables."""

    type: TypeRef
    modifiers: tuple[Modifier, ...]
    names: tuple[str, ...]
    span: Optional[SourceSpan] = field(default=None, compare=False)

    def has_modifier(self, keyword: str) -> bool:
        return _has_modifier(self.modifiers, keyword)


@dataclass(frozen=True)
class ConstructorMember:
    """A constructor declaration.

    ``body`` is None when the constructor has no block body
    (expression-bodied or bodiless declarations).
    """

    name: str
    modifiers: tuple[Modifier, ...]
    parameters: tuple[Parameter, ...]
    body: Optional[tuple[Statement, ...]]
    span: Optional[SourceSpan] = field(default=None, compare=False)
    parameter_list_span: Optional[SourceSpan] = field(default=None, compare=False)
    body_span: Optional[SourceSpan] = field(default=None, compare=False)

    def has_modifier(self, keyword: str) -> bool:
        return _has_modifier(self.modifiers, keyword)

    @property
    def parameter_names(self) -> list[str]:
        return [parameter.name for parameter in self.parameters]


@dataclass(frozen=True)
class MethodMember:
    """A method declaration."""

    name: str
    return_type: TypeRef
    modifiers: tuple[Modifier, ...]
    parameters: tuple[Parameter, ...]
    body: Optional[tuple[Statement, ...]]
    span: Optional[SourceSpan] = field(default=None, compare=False)

    def has_modifier(self, keyword: str) -> bool:
        return _has_modifier(self.modifiers, keyword)

    @property
    def modifier_keywords(self) -> list[str]:
        return [modifier.keyword for modifier in self.modifiers]


@dataclass(frozen=True)
class OpaqueMember:
    """Any other class member (properties, events, nested types...)."""

    kind: str
    normalized: str
    span: Optional[SourceSpan] = field(default=None, compare=False)


Member = Union[FieldMember, ConstructorMember, MethodMember, OpaqueMember]


@dataclass(frozen=True)
class ClassNode:
    """A type declaration and its direct members, in declaration order.

    ``kind`` is ``class`` for classes; structs, interfaces and records are
    modelled too so their methods can be converted, but only classes get a
    dependency constructor.
    """

    name: str
    members: tuple[Member, ...]
    kind: str = "class"
    span: Optional[SourceSpan] = field(default=None, compare=False)
    body_span: Optional[SourceSpan] = field(default=None, compare=False)

    @property
    def fields(self) -> list[FieldMember]:
        return [member for member in self.members if isinstance(member, FieldMember)]

    @property
    def constructors(self) -> list[ConstructorMember]:
        return [member for member in self.members if isinstance(member, ConstructorMember)]

    @property
    def methods(self) -> list[MethodMember]:
        return [member for member in self.members if isinstance(member, MethodMember)]
