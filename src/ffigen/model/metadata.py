# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Transitive metadata computed over the member type graph.

Two questions gate what the binding generators emit: does a type
(transitively) contain an unsigned integer, and does it (transitively)
contain a reference to a native object? Both are answered by walking field
types through records, enums and errors. The walk keeps a visited set keyed
by canonical name, so it terminates on any graph, including records that
refer to themselves through Optional, Sequence or Map. Objects and callback
interfaces are handles and are not descended into.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from ffigen.model.entities import (
    ArgumentDef,
    CallbackInterfaceDef,
    ComponentInterface,
    EnumDef,
    ErrorDef,
    FieldDef,
    FunctionDef,
    MethodDef,
    ObjectDef,
    RecordDef,
)
from ffigen.model.types import (
    UNSIGNED_TYPES,
    EnumTypeRef,
    ErrorTypeRef,
    ObjectTypeRef,
    PrimitiveTypeRef,
    RecordTypeRef,
    TypeRef,
    canonical_name,
    inner_types,
)

# ###############
# Public Interface
# ###############


def contains_unsigned_types(ci: ComponentInterface, types: Iterable[TypeRef]) -> bool:
    """Return True if any of *types* transitively contains an unsigned integer type."""
    return _any_reachable(ci, types, _is_unsigned)


def contains_object_references(ci: ComponentInterface, types: Iterable[TypeRef]) -> bool:
    """Return True if any of *types* transitively contains an object reference."""
    return _any_reachable(ci, types, lambda t: isinstance(t, ObjectTypeRef))


def member_types(ci: ComponentInterface, type_ref: TypeRef) -> list[TypeRef]:
    """Return the types directly contained in *type_ref*.

    For compound types these are the type parameters; for records, enums and
    errors they are the field types of the resolved definition. Every other
    type is a leaf.
    """
    inner = inner_types(type_ref)
    if inner:
        return inner
    if isinstance(type_ref, RecordTypeRef):
        record = ci.get_record_definition(type_ref.name)
        return [f.type for f in record.fields] if record is not None else []
    if isinstance(type_ref, EnumTypeRef):
        enum_def = ci.get_enum_definition(type_ref.name)
        return _variant_field_types(enum_def) if enum_def is not None else []
    if isinstance(type_ref, ErrorTypeRef):
        error = ci.get_error_definition(type_ref.name)
        return _variant_field_types(error) if error is not None else []
    return []


def record_contains_unsigned_types(ci: ComponentInterface, record: RecordDef) -> bool:
    return contains_unsigned_types(ci, _field_types(record.fields))


def record_contains_object_references(ci: ComponentInterface, record: RecordDef) -> bool:
    return contains_object_references(ci, _field_types(record.fields))


def enum_contains_unsigned_types(ci: ComponentInterface, enum_def: EnumDef | ErrorDef) -> bool:
    return contains_unsigned_types(ci, _variant_field_types(enum_def))


def enum_contains_object_references(ci: ComponentInterface, enum_def: EnumDef | ErrorDef) -> bool:
    return contains_object_references(ci, _variant_field_types(enum_def))


def callable_contains_unsigned_types(ci: ComponentInterface, func: FunctionDef | MethodDef) -> bool:
    """Return True if any argument or the return type contains an unsigned type."""
    return contains_unsigned_types(ci, _signature_types(func.arguments, func.return_type))


def object_contains_unsigned_types(ci: ComponentInterface, obj: ObjectDef) -> bool:
    types: list[TypeRef] = []
    for ctor in obj.constructors:
        types.extend(_signature_types(ctor.arguments, None))
    for method in obj.methods:
        types.extend(_signature_types(method.arguments, method.return_type))
    return contains_unsigned_types(ci, types)


def callback_interface_contains_unsigned_types(ci: ComponentInterface, cbi: CallbackInterfaceDef) -> bool:
    types: list[TypeRef] = []
    for method in cbi.methods:
        types.extend(_signature_types(method.arguments, method.return_type))
    return contains_unsigned_types(ci, types)


# ################
# Implementation
# ################


def _is_unsigned(type_ref: TypeRef) -> bool:
    return isinstance(type_ref, PrimitiveTypeRef) and type_ref.primitive in UNSIGNED_TYPES


def _any_reachable(
    ci: ComponentInterface,
    roots: Iterable[TypeRef],
    predicate: Callable[[TypeRef], bool],
) -> bool:
    """Depth-first search for a type satisfying *predicate*, visiting each type once."""
    visited: set[str] = set()
    stack: list[TypeRef] = list(roots)
    while stack:
        type_ref = stack.pop()
        key = canonical_name(type_ref)
        if key in visited:
            continue
        visited.add(key)
        if predicate(type_ref):
            return True
        stack.extend(member_types(ci, type_ref))
    return False


def _field_types(fields: Iterable[FieldDef]) -> list[TypeRef]:
    return [f.type for f in fields]


def _variant_field_types(enum_def: EnumDef | ErrorDef) -> list[TypeRef]:
    return [f.type for variant in enum_def.variants for f in variant.fields]


def _signature_types(arguments: Iterable[ArgumentDef], return_type: TypeRef | None) -> list[TypeRef]:
    types = [a.type for a in arguments]
    if return_type is not None:
        types.append(return_type)
    return types
