# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type algebra for the ffigen interface model."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveType(Enum):
    """Primitive (leaf) types supported by the ffigen type system."""

    UINT8 = "u8"
    INT8 = "i8"
    UINT16 = "u16"
    INT16 = "i16"
    UINT32 = "u32"
    INT32 = "i32"
    UINT64 = "u64"
    INT64 = "i64"
    FLOAT32 = "f32"
    FLOAT64 = "f64"
    BOOLEAN = "bool"
    STRING = "string"
    TIMESTAMP = "timestamp"
    DURATION = "duration"


UNSIGNED_TYPES = frozenset({PrimitiveType.UINT8, PrimitiveType.UINT16, PrimitiveType.UINT32, PrimitiveType.UINT64})
INTEGER_TYPES = UNSIGNED_TYPES | {PrimitiveType.INT8, PrimitiveType.INT16, PrimitiveType.INT32, PrimitiveType.INT64}
FLOAT_TYPES = frozenset({PrimitiveType.FLOAT32, PrimitiveType.FLOAT64})


class PrimitiveTypeRef(BaseModel):
    """Reference to a primitive type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveType


class OptionalTypeRef(BaseModel):
    """Reference to a parameterized Optional<T> type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["optional"] = "optional"
    inner_type: TypeRef


class SequenceTypeRef(BaseModel):
    """Reference to a parameterized Sequence<T> type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["sequence"] = "sequence"
    inner_type: TypeRef


class MapTypeRef(BaseModel):
    """Reference to a parameterized Map<String, T> type. Keys are always strings."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["map"] = "map"
    value_type: TypeRef


class EnumTypeRef(BaseModel):
    """Reference to an enum definition by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["enum"] = "enum"
    name: str


class RecordTypeRef(BaseModel):
    """Reference to a record definition by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["record"] = "record"
    name: str


class ObjectTypeRef(BaseModel):
    """Reference to an object definition by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    name: str


class ErrorTypeRef(BaseModel):
    """Reference to an error definition by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    name: str


class CallbackInterfaceTypeRef(BaseModel):
    """Reference to a callback interface definition by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["callback_interface"] = "callback_interface"
    name: str


# A type reference: one of the primitive, compound, or nominal types.
# The `kind` discriminator keeps deserialization of interface documents unambiguous.
TypeRef = Annotated[
    PrimitiveTypeRef
    | OptionalTypeRef
    | SequenceTypeRef
    | MapTypeRef
    | EnumTypeRef
    | RecordTypeRef
    | ObjectTypeRef
    | ErrorTypeRef
    | CallbackInterfaceTypeRef,
    _Field(discriminator="kind"),
]

CompoundTypeRef = OptionalTypeRef | SequenceTypeRef | MapTypeRef
NominalTypeRef = EnumTypeRef | RecordTypeRef | ObjectTypeRef | ErrorTypeRef | CallbackInterfaceTypeRef

STRING_TYPE = PrimitiveTypeRef(primitive=PrimitiveType.STRING)


def primitive(p: PrimitiveType) -> PrimitiveTypeRef:
    """Shorthand for ``PrimitiveTypeRef(primitive=p)``."""
    return PrimitiveTypeRef(primitive=p)


def canonical_name(type_ref: TypeRef) -> str:
    """Return the canonical name of *type_ref*.

    The mapping is injective: compound names prefix the inner canonical name
    with ``Optional``, ``Sequence`` or ``Map``; nominal names prefix the
    logical name with their kind. No keyword is a prefix of another, and a
    nominal name always ends the string.
    """
    if isinstance(type_ref, PrimitiveTypeRef):
        return _PRIMITIVE_CANONICAL_NAMES[type_ref.primitive]
    if isinstance(type_ref, OptionalTypeRef):
        return "Optional" + canonical_name(type_ref.inner_type)
    if isinstance(type_ref, SequenceTypeRef):
        return "Sequence" + canonical_name(type_ref.inner_type)
    if isinstance(type_ref, MapTypeRef):
        return "Map" + canonical_name(type_ref.value_type)
    return _NOMINAL_PREFIXES[type_ref.kind] + type_ref.name


def primitive_canonical_name(p: PrimitiveType) -> str:
    """Return the fixed canonical word for a primitive type."""
    return _PRIMITIVE_CANONICAL_NAMES[p]


def nominal_prefix(type_ref: NominalTypeRef) -> str:
    """Return the canonical-name prefix of a nominal type's kind."""
    return _NOMINAL_PREFIXES[type_ref.kind]


def is_compound(type_ref: TypeRef) -> bool:
    """Return True for Optional, Sequence and Map types."""
    return isinstance(type_ref, (OptionalTypeRef, SequenceTypeRef, MapTypeRef))


def is_nominal(type_ref: TypeRef) -> bool:
    """Return True for types that reference a declared entity by name."""
    return isinstance(type_ref, (EnumTypeRef, RecordTypeRef, ObjectTypeRef, ErrorTypeRef, CallbackInterfaceTypeRef))


def inner_types(type_ref: TypeRef) -> list[TypeRef]:
    """Return the direct type parameters of a compound type (empty for leaves)."""
    if isinstance(type_ref, (OptionalTypeRef, SequenceTypeRef)):
        return [type_ref.inner_type]
    if isinstance(type_ref, MapTypeRef):
        return [STRING_TYPE, type_ref.value_type]
    return []


def walk_type(type_ref: TypeRef) -> Iterator[TypeRef]:
    """Yield *type_ref* followed by every type nested inside it (pre-order).

    Nominal types are leaves here; following them requires the interface
    definitions.
    """
    yield type_ref
    for inner in inner_types(type_ref):
        yield from walk_type(inner)


# ################
# Implementation
# ################

_PRIMITIVE_CANONICAL_NAMES: dict[PrimitiveType, str] = {
    PrimitiveType.UINT8: "UInt8",
    PrimitiveType.INT8: "Int8",
    PrimitiveType.UINT16: "UInt16",
    PrimitiveType.INT16: "Int16",
    PrimitiveType.UINT32: "UInt32",
    PrimitiveType.INT32: "Int32",
    PrimitiveType.UINT64: "UInt64",
    PrimitiveType.INT64: "Int64",
    PrimitiveType.FLOAT32: "Float32",
    PrimitiveType.FLOAT64: "Float64",
    PrimitiveType.BOOLEAN: "Boolean",
    PrimitiveType.STRING: "String",
    PrimitiveType.TIMESTAMP: "Timestamp",
    PrimitiveType.DURATION: "Duration",
}

_NOMINAL_PREFIXES: dict[str, str] = {
    "enum": "Enum",
    "record": "Record",
    "object": "Object",
    "error": "Error",
    "callback_interface": "CallbackInterface",
}


# Resolve forward references for models that use TypeRef.
OptionalTypeRef.model_rebuild()
SequenceTypeRef.model_rebuild()
MapTypeRef.model_rebuild()
