# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The ABI-level surface of a component.

Every logical type crosses the native boundary in one of a small, closed set
of transport shapes (:class:`FFIType`). This module maps logical types onto
those shapes and derives the flat list of exported C symbols that a binding
declares and calls.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ffigen.model.entities import (
    CallbackInterfaceDef,
    ComponentInterface,
    ConstructorDef,
    FunctionDef,
    MethodDef,
    ObjectDef,
)
from ffigen.model.types import (
    CallbackInterfaceTypeRef,
    ObjectTypeRef,
    PrimitiveType,
    PrimitiveTypeRef,
    TypeRef,
)
from ffigen.naming import snake

# ###############
# Public Interface
# ###############


class FFIType(Enum):
    """Transport shape of a value at the native ABI boundary."""

    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    HANDLE = "handle"
    BUFFER = "buffer"
    FOREIGN_BYTES = "foreign_bytes"
    FOREIGN_CALLBACK = "foreign_callback"

    @property
    def abi_slot(self) -> FFIType:
        """The register-level slot: signed and unsigned integers of one width share it."""
        return _ABI_SLOTS.get(self, self)


class FFIArgument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: FFIType


class FFIFunction(BaseModel):
    """An exported native symbol.

    Attributes:
        name: The C symbol name.
        arguments: Positional arguments, excluding the call status.
        return_type: The transport shape of the result, or None for void.
        has_call_status: Whether a trailing call-status out pointer is passed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: tuple[FFIArgument, ...] = ()
    return_type: FFIType | None = None
    has_call_status: bool = True


def ffi_type(type_ref: TypeRef) -> FFIType:
    """Return the transport shape used to pass a value of *type_ref*.

    Integers keep their width and signedness, booleans travel as ``INT8``,
    objects as an opaque ``HANDLE`` and callback interfaces as the ``UINT64``
    key of the foreign handle map. Everything else is serialized into a
    ``BUFFER``.
    """
    if isinstance(type_ref, PrimitiveTypeRef):
        return _PRIMITIVE_FFI_TYPES.get(type_ref.primitive, FFIType.BUFFER)
    if isinstance(type_ref, ObjectTypeRef):
        return FFIType.HANDLE
    if isinstance(type_ref, CallbackInterfaceTypeRef):
        return FFIType.UINT64
    return FFIType.BUFFER


def buffer_alloc_symbol(namespace: str) -> str:
    return f"ffi_{snake(namespace)}_buffer_alloc"


def buffer_from_bytes_symbol(namespace: str) -> str:
    return f"ffi_{snake(namespace)}_buffer_from_bytes"


def buffer_free_symbol(namespace: str) -> str:
    return f"ffi_{snake(namespace)}_buffer_free"


def buffer_reserve_symbol(namespace: str) -> str:
    return f"ffi_{snake(namespace)}_buffer_reserve"


def function_symbol(namespace: str, func: FunctionDef) -> str:
    return f"{snake(namespace)}_{snake(func.name)}"


def object_free_symbol(namespace: str, obj: ObjectDef) -> str:
    return f"ffi_{snake(namespace)}_{snake(obj.name)}_object_free"


def constructor_symbol(namespace: str, obj: ObjectDef, ctor: ConstructorDef) -> str:
    return f"{snake(namespace)}_{snake(obj.name)}_{snake(ctor.name)}"


def method_symbol(namespace: str, obj: ObjectDef, method: MethodDef) -> str:
    return f"{snake(namespace)}_{snake(obj.name)}_{snake(method.name)}"


def callback_init_symbol(namespace: str, cbi: CallbackInterfaceDef) -> str:
    return f"ffi_{snake(namespace)}_{snake(cbi.name)}_init_callback"


def ffi_functions(ci: ComponentInterface) -> list[FFIFunction]:
    """Derive every native symbol the component exports, in a stable order.

    The order is: the four buffer-management functions, top-level functions,
    then for each object its free function, constructors and methods, and
    finally one callback registration function per callback interface.
    """
    ns = ci.namespace
    result: list[FFIFunction] = [
        FFIFunction(
            name=buffer_alloc_symbol(ns),
            arguments=(FFIArgument(name="size", type=FFIType.INT32),),
            return_type=FFIType.BUFFER,
        ),
        FFIFunction(
            name=buffer_from_bytes_symbol(ns),
            arguments=(FFIArgument(name="bytes", type=FFIType.FOREIGN_BYTES),),
            return_type=FFIType.BUFFER,
        ),
        FFIFunction(
            name=buffer_free_symbol(ns),
            arguments=(FFIArgument(name="buf", type=FFIType.BUFFER),),
        ),
        FFIFunction(
            name=buffer_reserve_symbol(ns),
            arguments=(
                FFIArgument(name="buf", type=FFIType.BUFFER),
                FFIArgument(name="additional", type=FFIType.INT32),
            ),
            return_type=FFIType.BUFFER,
        ),
    ]
    for func in ci.functions:
        result.append(
            FFIFunction(
                name=function_symbol(ns, func),
                arguments=_arguments(func.arguments),
                return_type=_return_type(func.return_type),
            )
        )
    for obj in ci.objects:
        result.append(
            FFIFunction(
                name=object_free_symbol(ns, obj),
                arguments=(FFIArgument(name="ptr", type=FFIType.HANDLE),),
            )
        )
        for ctor in obj.constructors:
            result.append(
                FFIFunction(
                    name=constructor_symbol(ns, obj, ctor),
                    arguments=_arguments(ctor.arguments),
                    return_type=FFIType.HANDLE,
                )
            )
        for method in obj.methods:
            result.append(
                FFIFunction(
                    name=method_symbol(ns, obj, method),
                    arguments=(FFIArgument(name="ptr", type=FFIType.HANDLE),) + _arguments(method.arguments),
                    return_type=_return_type(method.return_type),
                )
            )
    for cbi in ci.callback_interfaces:
        result.append(
            FFIFunction(
                name=callback_init_symbol(ns, cbi),
                arguments=(FFIArgument(name="callback_stub", type=FFIType.FOREIGN_CALLBACK),),
                has_call_status=False,
            )
        )
    return result


# ################
# Implementation
# ################

_PRIMITIVE_FFI_TYPES: dict[PrimitiveType, FFIType] = {
    PrimitiveType.INT8: FFIType.INT8,
    PrimitiveType.UINT8: FFIType.UINT8,
    PrimitiveType.INT16: FFIType.INT16,
    PrimitiveType.UINT16: FFIType.UINT16,
    PrimitiveType.INT32: FFIType.INT32,
    PrimitiveType.UINT32: FFIType.UINT32,
    PrimitiveType.INT64: FFIType.INT64,
    PrimitiveType.UINT64: FFIType.UINT64,
    PrimitiveType.FLOAT32: FFIType.FLOAT32,
    PrimitiveType.FLOAT64: FFIType.FLOAT64,
    PrimitiveType.BOOLEAN: FFIType.INT8,
}

_ABI_SLOTS: dict[FFIType, FFIType] = {
    FFIType.UINT8: FFIType.INT8,
    FFIType.UINT16: FFIType.INT16,
    FFIType.UINT32: FFIType.INT32,
    FFIType.UINT64: FFIType.INT64,
}


def _arguments(arguments) -> tuple[FFIArgument, ...]:
    return tuple(FFIArgument(name=snake(a.name), type=ffi_type(a.type)) for a in arguments)


def _return_type(return_type: TypeRef | None) -> FFIType | None:
    return ffi_type(return_type) if return_type is not None else None
