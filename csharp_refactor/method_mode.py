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

"""Conversion of a method between async and sync signatures.

Only the signature changes: the ``async`` modifier and one level of
``Task`` wrapping on the return type. Parameters and body are carried over
as they are; a body that awaits something is not rewritten.
"""

import logging
from dataclasses import replace
from typing import Optional

from csharp_refactor.config import RefactorSettings
from csharp_refactor.protocol import CancellationToken, MethodMode, is_cancelled
from csharp_refactor.syntax.nodes import VOID, MethodMember, Modifier, TypeRef

logger = logging.getLogger(__name__)

ASYNC_MODIFIER = "async"


def is_deferred(type_ref: TypeRef, settings: Optional[RefactorSettings] = None) -> bool:
    """True for ``Task``, ``ValueTask`` and their generic forms (or configured names)."""
    settings = settings or RefactorSettings()
    return type_ref.simple_name in settings.deferred_type_names and len(type_ref.arguments) <= 1


def unwrap_deferred(type_ref: TypeRef, settings: Optional[RefactorSettings] = None) -> TypeRef:
    """Remove one level of deferred wrapping.

    ``Task`` -> ``void``, ``Task<T>`` -> ``T``, ``Task<Task<T>>`` -> ``Task<T>``.
    Other types are returned unchanged.
    """
    if not is_deferred(type_ref, settings):
        return type_ref
    if not type_ref.arguments:
        return VOID
    return type_ref.arguments[0]


def wrap_deferred(type_ref: TypeRef, settings: Optional[RefactorSettings] = None) -> TypeRef:
    """Add one level of deferred wrapping: ``void`` -> ``Task``, ``T`` -> ``Task<T>``."""
    settings = settings or RefactorSettings()
    if type_ref.is_void:
        return TypeRef(settings.deferred_type_name)
    return TypeRef(settings.deferred_type_name, arguments=(type_ref,))


def to_sync(
    method: MethodMember,
    cancellation: Optional[CancellationToken] = None,
    settings: Optional[RefactorSettings] = None,
) -> MethodMember:
    """Strip ``async`` and one level of ``Task`` from a method signature."""
    if is_cancelled(cancellation):
        return method

    modifiers = tuple(m for m in method.modifiers if m.keyword != ASYNC_MODIFIER)
    return_type = unwrap_deferred(method.return_type, settings)

    logger.debug(f"'{method.name}': {method.return_type} -> {return_type}")
    return replace(method, modifiers=modifiers, return_type=return_type)


def to_async(
    method: MethodMember,
    cancellation: Optional[CancellationToken] = None,
    settings: Optional[RefactorSettings] = None,
) -> MethodMember:
    """Add ``async`` and wrap the return type in ``Task``."""
    if is_cancelled(cancellation):
        return method

    modifiers = method.modifiers
    if not method.has_modifier(ASYNC_MODIFIER):
        modifiers = modifiers + (Modifier(ASYNC_MODIFIER),)
    return_type = wrap_deferred(method.return_type, settings)

    logger.debug(f"'{method.name}': {method.return_type} -> {return_type}")
    return replace(method, modifiers=modifiers, return_type=return_type)


def convert_method_mode(
    method: MethodMember,
    mode: MethodMode,
    cancellation: Optional[CancellationToken] = None,
    settings: Optional[RefactorSettings] = None,
) -> MethodMember:
    """Convert a method to the given mode.

    Args:
        method: Method to convert; never modified
        mode: Target mode
        cancellation: Checked on entry
        settings: Deferred type names to recognise and wrap with

    Returns:
        The converted method
    """
    if mode is MethodMode.SYNC:
        return to_sync(method, cancellation, settings)
    return to_async(method, cancellation, settings)
