# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Naming rules and code-type registry for the Python (ctypes) target."""

from __future__ import annotations

import keyword

from ffigen.bindings.backend import CodeType, GenerationError, LanguageOracle
from ffigen.bindings.python.callback_interface import CallbackInterfaceCodeType
from ffigen.bindings.python.compounds import MapCodeType, OptionalCodeType, SequenceCodeType
from ffigen.bindings.python.enum_ import EnumCodeType
from ffigen.bindings.python.error import ErrorCodeType
from ffigen.bindings.python.object_ import ObjectCodeType
from ffigen.bindings.python.primitives import primitive_code_type
from ffigen.bindings.python.record import RecordCodeType
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
from ffigen.naming import shouty_snake, snake, upper_camel

# ###############
# Public Interface
# ###############


class PythonLanguageOracle(LanguageOracle):
    """Python naming: ``UpperCamel`` classes, ``snake_case`` functions and variables."""

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
        return _escape_keyword(snake(nm))

    def var_name(self, nm: str) -> str:
        return _escape_keyword(snake(nm))

    def enum_variant_name(self, nm: str) -> str:
        return shouty_snake(nm)

    def exception_name(self, nm: str) -> str:
        """Python has no separate notion of a fatal error, so this is the class name."""
        return self.class_name(nm)

    def ffi_type_label(self, ffi_type: FFIType) -> str:
        return _FFI_TYPE_LABELS[ffi_type]


# ################
# Implementation
# ################

_FFI_TYPE_LABELS: dict[FFIType, str] = {
    FFIType.INT8: "ctypes.c_int8",
    FFIType.UINT8: "ctypes.c_uint8",
    FFIType.INT16: "ctypes.c_int16",
    FFIType.UINT16: "ctypes.c_uint16",
    FFIType.INT32: "ctypes.c_int32",
    FFIType.UINT32: "ctypes.c_uint32",
    FFIType.INT64: "ctypes.c_int64",
    FFIType.UINT64: "ctypes.c_uint64",
    FFIType.FLOAT32: "ctypes.c_float",
    FFIType.FLOAT64: "ctypes.c_double",
    FFIType.HANDLE: "ctypes.c_void_p",
    FFIType.BUFFER: "_NativeBuffer",
    FFIType.FOREIGN_BYTES: "_ForeignBytes",
    FFIType.FOREIGN_CALLBACK: "_UNIFFI_FOREIGN_CALLBACK_T",
}


# Parameter names of the generated methods and classmethods.
_RESERVED_NAMES = frozenset({"self", "cls"})


def _escape_keyword(name: str) -> str:
    if keyword.iskeyword(name) or name in _RESERVED_NAMES:
        return name + "_"
    return name
