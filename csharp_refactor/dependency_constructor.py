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

"""Dependency constructor synthesis.

Every ``readonly`` instance field of a class becomes a constructor
dependency: a parameter named by :func:`derive_parameter_name` and an
assignment ``field = parameter;`` in the constructor body. :func:`synthesize`
creates the constructor or extends the existing one with whatever is
missing; :func:`is_applicable` answers whether anything is missing at all.

Matching is purely by name. Parameter types are never compared and only
statements of the exact shape ``identifier = identifier;`` count as
assignments.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from csharp_refactor.protocol import CancellationToken, is_cancelled
from csharp_refactor.syntax.nodes import (
    AssignmentStatement,
    ClassNode,
    ConstructorMember,
    Modifier,
    Parameter,
    TypeRef,
)

logger = logging.getLogger(__name__)

READONLY_MODIFIER = "readonly"
STATIC_MODIFIER = "static"
CONSTRUCTOR_ACCESS_MODIFIER = "public"


@dataclass(frozen=True)
class DependencyCandidate:
    """A read-only field and the constructor parameter that feeds it."""

    field_type: TypeRef
    field_name: str
    parameter_name: str


def derive_parameter_name(field_name: str) -> str:
    """Map a field name to its constructor parameter name.

    ``_logger`` becomes ``logger`` and ``logger`` becomes ``_logger``. Two
    fields may map to the same name (``_x`` and ``__x`` do not, but ``x``
    and ``__x`` do); no disambiguation is attempted.
    """
    if field_name.startswith("_"):
        return field_name[1:]
    return "_" + field_name


def collect_candidates(class_node: ClassNode) -> list[DependencyCandidate]:
    """Candidates for every read-only instance field, in declaration order."""
    candidates = []
    for field_member in class_node.fields:
        if not field_member.has_modifier(READONLY_MODIFIER):
            continue
        if field_member.has_modifier(STATIC_MODIFIER):
            continue
        for name in field_member.names:
            candidates.append(
                DependencyCandidate(
                    field_type=field_member.type,
                    field_name=name,
                    parameter_name=derive_parameter_name(name),
                )
            )
    return candidates


def find_constructor(class_node: ClassNode) -> Optional[ConstructorMember]:
    """First instance constructor declared directly in the class."""
    for constructor in class_node.constructors:
        if not constructor.has_modifier(STATIC_MODIFIER):
            return constructor
    return None


def find_parameter_collisions(candidates: list[DependencyCandidate]) -> dict[str, list[str]]:
    """Parameter names produced by more than one field.

    Returns:
        Mapping of parameter name to the field names that produce it
    """
    fields_by_parameter: dict[str, list[str]] = {}
    for candidate in candidates:
        fields_by_parameter.setdefault(candidate.parameter_name, []).append(candidate.field_name)
    return {name: fields for name, fields in fields_by_parameter.items() if len(fields) > 1}


def _assigned_field_names(
    constructor: ConstructorMember,
    field_names: set[str],
) -> set[str]:
    return {
        statement.target
        for statement in constructor.body or ()
        if isinstance(statement, AssignmentStatement) and statement.target in field_names
    }


def _missing_parameters(
    candidates: list[DependencyCandidate],
    constructor: Optional[ConstructorMember],
) -> list[Parameter]:
    existing = set(constructor.parameter_names) if constructor is not None else set()
    return [
        Parameter(name=candidate.parameter_name, type=candidate.field_type)
        for candidate in candidates
        if candidate.parameter_name not in existing
    ]


def _missing_assignments(
    candidates: list[DependencyCandidate],
    constructor: Optional[ConstructorMember],
) -> list[AssignmentStatement]:
    assigned: set[str] = set()
    if constructor is not None:
        field_names = {candidate.field_name for candidate in candidates}
        assigned = _assigned_field_names(constructor, field_names)
    return [
        AssignmentStatement(target=candidate.field_name, value=candidate.parameter_name)
        for candidate in candidates
        if candidate.field_name not in assigned
    ]


def synthesize(
    class_node: ClassNode,
    cancellation: Optional[CancellationToken] = None,
) -> ClassNode:
    """Create or extend the class constructor so every dependency is wired.

    Missing parameters are appended after the existing ones and missing
    assignments after the existing statements, both in field declaration
    order. Without a constructor a public one named after the class is
    appended to the members.

    Args:
        class_node: Class to transform; never modified
        cancellation: Checked on entry

    Returns:
        A new ClassNode, or ``class_node`` itself when there is nothing to add
    """
    if is_cancelled(cancellation):
        return class_node

    candidates = collect_candidates(class_node)
    constructor = find_constructor(class_node)

    if constructor is not None and constructor.body is None:
        logger.warning(
            f"Constructor of '{class_node.name}' has no block body, leaving it unchanged"
        )
        return class_node

    parameters = _missing_parameters(candidates, constructor)
    assignments = _missing_assignments(candidates, constructor)
    if not parameters and not assignments:
        return class_node

    logger.debug(
        f"'{class_node.name}': adding {len(parameters)} parameter(s) "
        f"and {len(assignments)} assignment(s)"
    )

    if constructor is None:
        new_constructor = ConstructorMember(
            name=class_node.name,
            modifiers=(Modifier(CONSTRUCTOR_ACCESS_MODIFIER),),
            parameters=tuple(parameters),
            body=tuple(assignments),
        )
        return replace(class_node, members=class_node.members + (new_constructor,))

    updated = replace(
        constructor,
        parameters=constructor.parameters + tuple(parameters),
        body=constructor.body + tuple(assignments),
    )
    members = tuple(updated if member is constructor else member for member in class_node.members)
    return replace(class_node, members=members)


def is_applicable(
    class_node: ClassNode,
    cancellation: Optional[CancellationToken] = None,
) -> bool:
    """Check whether :func:`synthesize` would change the class.

    Args:
        class_node: Class to inspect
        cancellation: Checked on entry; a cancelled token yields False

    Returns:
        True if a read-only field lacks a parameter or an assignment
    """
    if is_cancelled(cancellation):
        return False

    candidates = collect_candidates(class_node)
    if not candidates:
        return False

    constructor = find_constructor(class_node)
    if constructor is None:
        return True
    if constructor.body is None:
        return False

    if _missing_parameters(candidates, constructor):
        return True

    return len(_missing_assignments(candidates, constructor)) > 0


# Names used by host integrations
synthesize_dependency_constructor = synthesize
is_dependency_constructor_applicable = is_applicable
