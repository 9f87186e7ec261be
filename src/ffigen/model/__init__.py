# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface model for ffigen (types, literals, entities and the FFI surface)."""

from ffigen.model.entities import (
    ArgumentDef,
    CallbackInterfaceDef,
    ComponentInterface,
    ConstructorDef,
    EnumDef,
    ErrorDef,
    FieldDef,
    FunctionDef,
    MethodDef,
    ObjectDef,
    RecordDef,
    VariantDef,
)
from ffigen.model.ffi import FFIArgument, FFIFunction, FFIType, ffi_functions, ffi_type
from ffigen.model.literals import (
    BooleanLiteral,
    EmptyMapLiteral,
    EmptySequenceLiteral,
    EnumLiteral,
    FloatLiteral,
    IntLiteral,
    LiteralValue,
    NullLiteral,
    Radix,
    StringLiteral,
    UIntLiteral,
)
from ffigen.model.types import (
    CallbackInterfaceTypeRef,
    EnumTypeRef,
    ErrorTypeRef,
    MapTypeRef,
    ObjectTypeRef,
    OptionalTypeRef,
    PrimitiveType,
    PrimitiveTypeRef,
    RecordTypeRef,
    SequenceTypeRef,
    TypeRef,
    canonical_name,
)

__all__ = [
    # Type system
    "PrimitiveType",
    "PrimitiveTypeRef",
    "OptionalTypeRef",
    "SequenceTypeRef",
    "MapTypeRef",
    "EnumTypeRef",
    "RecordTypeRef",
    "ObjectTypeRef",
    "ErrorTypeRef",
    "CallbackInterfaceTypeRef",
    "TypeRef",
    "canonical_name",
    # Literals
    "Radix",
    "BooleanLiteral",
    "StringLiteral",
    "NullLiteral",
    "EmptySequenceLiteral",
    "EmptyMapLiteral",
    "EnumLiteral",
    "IntLiteral",
    "UIntLiteral",
    "FloatLiteral",
    "LiteralValue",
    # Entities
    "FieldDef",
    "ArgumentDef",
    "VariantDef",
    "EnumDef",
    "RecordDef",
    "ErrorDef",
    "FunctionDef",
    "ConstructorDef",
    "MethodDef",
    "ObjectDef",
    "CallbackInterfaceDef",
    "ComponentInterface",
    # FFI surface
    "FFIType",
    "FFIArgument",
    "FFIFunction",
    "ffi_type",
    "ffi_functions",
]
