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

"""Splice transformed nodes back into source text.

A transform returns a new node; this module turns the difference between
the parsed node and the new one into minimal text edits. Transforms only
ever append parameters, statements and members, or rewrite a method's
modifiers and return type, so edits are insertions at known anchors plus
the return type replacement. All other text, comments included, is left
as written.
"""

import logging
from pathlib import Path

from csharp_refactor.protocol import CodeEdit
from csharp_refactor.syntax.nodes import (
    ClassNode,
    ConstructorMember,
    MethodMember,
)
from csharp_refactor.syntax.parser import CSharpDocument
from csharp_refactor.syntax.printer import (
    render_constructor,
    render_parameters,
    render_statements,
)

logger = logging.getLogger(__name__)


class SpliceError(ValueError):
    """The updated node is not an append-only change of the original."""


def class_edits(
    document: CSharpDocument,
    file_path: Path,
    original: ClassNode,
    updated: ClassNode,
    indent_unit: str = "    ",
) -> list[CodeEdit]:
    """Compute the edits that turn ``original`` into ``updated`` in the source.

    Args:
        document: Parsed document ``original`` came from
        file_path: Path recorded in the edit locations
        original: Class node as parsed
        updated: Class node returned by a transform
        indent_unit: Indentation unit used when the source gives no hint

    Returns:
        List of edits, empty when the nodes are structurally equal

    Raises:
        SpliceError: If members were removed or changed in a way that is not
            an append to a constructor
    """
    if original == updated:
        return []
    if len(updated.members) < len(original.members):
        raise SpliceError(f"Members were removed from class '{original.name}'")

    edits: list[CodeEdit] = []

    for old_member, new_member in zip(original.members, updated.members):
        if old_member == new_member:
            continue
        if isinstance(old_member, ConstructorMember) and isinstance(new_member, ConstructorMember):
            edits.extend(
                _constructor_edits(document, file_path, old_member, new_member, indent_unit)
            )
        else:
            raise SpliceError(
                f"Cannot splice a changed {type(old_member).__name__} in '{original.name}'"
            )

    for new_member in updated.members[len(original.members) :]:
        if not isinstance(new_member, ConstructorMember):
            raise SpliceError(f"Cannot insert a new {type(new_member).__name__}")
        edits.append(_insert_constructor(document, file_path, original, new_member, indent_unit))

    logger.debug(f"Computed {len(edits)} edit(s) for class '{original.name}'")
    return edits


def _constructor_edits(
    document: CSharpDocument,
    file_path: Path,
    old: ConstructorMember,
    new: ConstructorMember,
    indent_unit: str,
) -> list[CodeEdit]:
    edits = []
    source = document.source

    if tuple(new.parameters[: len(old.parameters)]) != old.parameters:
        raise SpliceError(f"Existing parameters of '{old.name}' were changed")
    added_parameters = new.parameters[len(old.parameters) :]
    if added_parameters:
        text = render_parameters(added_parameters)
        if old.parameters:
            anchor = old.parameters[-1].span.end
            text = ", " + text
        else:
            anchor = old.parameter_list_span.start + 1  # just inside "("
        edits.append(
            CodeEdit(
                location=document.location_of(file_path, anchor),
                new_text=text,
                description=f"Add {len(added_parameters)} parameter(s) to '{old.name}'",
            )
        )

    old_body = old.body or ()
    new_body = new.body or ()
    if tuple(new_body[: len(old_body)]) != old_body:
        raise SpliceError(f"Existing statements of '{old.name}' were changed")
    added_statements = new_body[len(old_body) :]
    if added_statements:
        if old.body_span is None:
            raise SpliceError(f"Constructor '{old.name}' has no block body")

        close_brace = old.body_span.end - 1
        member_indent = document.indent_at(old.span.start)
        last = old_body[-1].span if old_body else None
        if last is not None and document.is_line_blank_before(last.start):
            statement_indent = document.indent_at(last.start)
        else:
            statement_indent = member_indent + indent_unit

        lines = render_statements(added_statements, statement_indent, document.newline)
        if document.is_line_blank_before(close_brace):
            start = end = source.rfind("\n", 0, close_brace) + 1
            text = lines
        else:
            start, end = _trailing_space_start(source, close_brace), close_brace
            text = document.newline + lines + member_indent

        edits.append(
            CodeEdit(
                location=document.location_of(file_path, start, end),
                new_text=text,
                description=f"Add {len(added_statements)} assignment(s) to '{old.name}'",
            )
        )

    return edits


def _trailing_space_start(source: str, offset: int) -> int:
    """Start of the spaces and tabs that run up to ``offset``."""
    return len(source[:offset].rstrip(" \t"))


def _insert_constructor(
    document: CSharpDocument,
    file_path: Path,
    class_node: ClassNode,
    constructor: ConstructorMember,
    indent_unit: str,
) -> CodeEdit:
    if class_node.body_span is None:
        raise SpliceError(f"Class '{class_node.name}' has no body")

    source = document.source
    newline = document.newline
    close_brace = class_node.body_span.end - 1
    class_indent = document.indent_at(class_node.span.start)

    anchored_members = [member for member in class_node.members if member.span is not None]
    first_start = anchored_members[0].span.start if anchored_members else None
    if first_start is not None and document.is_line_blank_before(first_start):
        member_indent = document.indent_at(first_start)
    else:
        # Members share a line with the class brace
        member_indent = class_indent + indent_unit

    rendered = render_constructor(constructor, member_indent, indent_unit, newline)

    if document.is_line_blank_before(close_brace):
        start = end = source.rfind("\n", 0, close_brace) + 1
        text = (newline if anchored_members else "") + rendered
    else:
        start, end = _trailing_space_start(source, close_brace), close_brace
        text = newline + rendered + class_indent

    return CodeEdit(
        location=document.location_of(file_path, start, end),
        new_text=text,
        description=f"Add constructor '{constructor.name}'",
    )


def method_edits(
    document: CSharpDocument,
    file_path: Path,
    original: MethodMember,
    updated: MethodMember,
) -> list[CodeEdit]:
    """Compute the edits for a method whose modifiers or return type changed.

    Raises:
        SpliceError: If parameters or body differ between the two nodes
    """
    if original == updated:
        return []
    if original.parameters != updated.parameters or original.body != updated.body:
        raise SpliceError(f"Only the signature of '{original.name}' may change")

    source = document.source
    edits = []

    kept = {modifier.keyword for modifier in updated.modifiers}
    for modifier in original.modifiers:
        if modifier.keyword in kept or modifier.span is None:
            continue
        # Remove the keyword together with the whitespace that follows it
        end = modifier.span.end
        while end < len(source) and source[end] in " \t":
            end += 1
        edits.append(
            CodeEdit(
                location=document.location_of(file_path, modifier.span.start, end),
                new_text="",
                description=f"Remove '{modifier.keyword}' from '{original.name}'",
            )
        )

    existing = {modifier.keyword for modifier in original.modifiers}
    added = [modifier.keyword for modifier in updated.modifiers if modifier.keyword not in existing]

    return_span = original.return_type.span
    if return_span is None:
        raise SpliceError(f"Return type of '{original.name}' has no source position")

    if added or original.return_type != updated.return_type:
        prefix = "".join(f"{keyword} " for keyword in added)
        if original.return_type != updated.return_type:
            replacement = updated.return_type.render()
        else:
            replacement = source[return_span.start : return_span.end]
        edits.append(
            CodeEdit(
                location=document.location_of(file_path, return_span.start, return_span.end),
                new_text=prefix + replacement,
                description=f"Change signature of '{original.name}'",
            )
        )

    return edits
