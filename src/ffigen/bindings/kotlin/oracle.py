# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Naming rules and code-type registry for the Kotlin (JNA) target."""

from __future__ import annotations

from ffigen.bindings.backend import CodeType, GenerationError, LanguageOracle
from ffigen.bindings.kotlin.callback_interface import CallbackInterfaceCodeType
from ffigen.bindings.kotlin.compounds import MapCodeType, OptionalCodeType, SequenceCodeType
from ffigen.bindings.kotlin.enum_ import EnumCodeType
from ffigen.bindings.kotlin.error import ErrorCodeType
from ffigen.bindings.kotlin.object_ import ObjectCodeType
from ffigen.bindings.kotlin.primitives import primitive_code_type
from ffigen.bindings.kotlin.record import RecordCodeType
from ffigen.model.entities import (
    CallbackInterfaceDef,
    Definition,
    EnumDef,
    ErrorDef,
    ObjectDef,
    RecordDef,
)
from ffigen.model.ffi import FFIType
from ffigen.model.types import (
    MapTypeRef,
    OptionalTypeRef,
    PrimitiveTypeRef,
    SequenceTypeRef,
    TypeRef,
    canonical_name,
)
from ffigen.naming import lower_camel, shouty_snake, upper_camel

# ###############
# Public Interface
# ###############


class KotlinLanguageOracle(LanguageOracle):
    """Kotlin naming: ``UpperCamel`` classes, ``lowerCamel`` members and
    ``SHOUTY_SNAKE`` enum constants."""

    def create_code_type(self, type_ref: TypeRef, definition: Definition | None) -> CodeType:
        if isinstance(type_ref, PrimitiveTypeRef):
            return primitive_code_type(type_ref.primitive)
        if isinstance(type_ref, OptionalTypeRef):
            return OptionalCodeType(type_ref.inner_type, type_ref)
        if isinstance(type_ref, SequenceTypeRef):
            return SequenceCodeType(type_ref.inner_type, type_ref)
        if isinstance(type_ref, MapTypeRef):
            return MapCodeType(type_ref.value_type, type_ref)
        if isinstance(definition, EnumDef):
            return EnumCodeType(definition)
        if isinstance(definition, RecordDef):
            return RecordCodeType(definition)
        if isinstance(definition, ErrorDef):
            return ErrorCodeType(definition)
        if isinstance(definition, ObjectDef):
            return ObjectCodeType(definition)
        if isinstance(definition, CallbackInterfaceDef):
            return CallbackInterfaceCodeType(definition)
        raise GenerationError("No code type for type", entity=canonical_name(type_ref))

    def class_name(self, nm: str) -> str:
        return upper_camel(nm)

    def fn_name(self, nm: str) -> str:
        return _escape_keyword(lower_camel(nm))

    def var_name(self, nm: str) -> str:
        return _escape_keyword(lower_camel(nm))

    def enum_variant_name(self, nm: str) -> str:
        return shouty_snake(nm)

    def exception_name(self, nm: str) -> str:
        """Kotlin convention names throwables ``...Exception``, so a trailing
        ``Error`` is replaced."""
        if nm.endswith("Error"):
            return nm[: -len("Error")] + "Exception"
        return nm

    def ffi_type_label(self, ffi_type: FFIType) -> str:
        return _FFI_TYPE_LABELS[ffi_type.abi_slot]


# ################
# Implementation
# ################

_FFI_TYPE_LABELS: dict[FFIType, str] = {
    FFIType.INT8: "Byte",
    FFIType.INT16: "Short",
    FFIType.INT32: "Int",
    FFIType.INT64: "Long",
    FFIType.FLOAT32: "Float",
    FFIType.FLOAT64: "Double",
    FFIType.HANDLE: "Pointer",
    FFIType.BUFFER: "NativeBuffer.ByValue",
    FFIType.FOREIGN_BYTES: "ForeignBytes.ByValue",
    FFIType.FOREIGN_CALLBACK: "ForeignCallback",
}

# Hard keywords cannot be used as identifiers without backticks.
_KEYWORDS = frozenset(
    {
        "as",
        "break",
        "class",
        "continue",
        "do",
        "else",
        "false",
        "for",
        "fun",
        "if",
        "in",
        "interface",
        "is",
        "null",
        "object",
        "package",
        "return",
        "super",
        "this",
        "throw",
        "true",
        "try",
        "typealias",
        "typeof",
        "val",
        "var",
        "when",
        "while",
    }
)


def _escape_keyword(name: str) -> str:
    if name in _KEYWORDS:
        return f"`{name}`"
    return name
