# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The fixed runtime fragment at the top of every generated Python module.

It implements the buffer protocol, call-status checking, the object handle
lifecycle and callback dispatch once, so that per-type helper code stays
small. The only variable parts are the namespace-specific native symbols and
the ctypes signature declarations.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle
from ffigen.bindings.templating import block, indent, render
from ffigen.model.entities import ComponentInterface
from ffigen.model.ffi import FFIFunction, buffer_alloc_symbol, buffer_free_symbol, ffi_functions

# ###############
# Public Interface
# ###############

RUNTIME_IMPORTS = ["import ctypes", "import ctypes.util", "import struct", "import threading"]


def runtime_code(oracle: LanguageOracle, ci: ComponentInterface, cdylib_name: str) -> str:
    """Render the runtime fragment for *ci*, loading the native library *cdylib_name*."""
    declarations = [_declaration(oracle, f) for f in ffi_functions(ci)]
    return render(
        _RUNTIME_TEMPLATE,
        buffer_alloc=buffer_alloc_symbol(ci.namespace),
        buffer_free=buffer_free_symbol(ci.namespace),
        cdylib=cdylib_name,
        ffi_declarations=indent(block(declarations, "pass"), 1),
    )


# ################
# Implementation
# ################


def _declaration(oracle: LanguageOracle, func: FFIFunction) -> str:
    argtypes = [oracle.ffi_type_label(a.type) for a in func.arguments]
    if func.has_call_status:
        argtypes.append("ctypes.POINTER(_NativeCallStatus)")
    restype = oracle.ffi_type_label(func.return_type) if func.return_type is not None else "None"
    return "\n".join(
        [
            f"lib.{func.name}.argtypes = [{', '.join(argtypes)}]",
            f"lib.{func.name}.restype = {restype}",
        ]
    )


_RUNTIME_TEMPLATE = """\
_UNIFFI_DEFAULT = object()


class InternalError(Exception):
    \"\"\"Raised when the native library and these bindings disagree.\"\"\"


class ObjectDestroyedError(InternalError):
    \"\"\"Raised when an object is used or destroyed after it was destroyed.\"\"\"


class _NativeBuffer(ctypes.Structure):
    _fields_ = [
        ("capacity", ctypes.c_int32),
        ("len", ctypes.c_int32),
        ("data", ctypes.POINTER(ctypes.c_char)),
    ]

    @staticmethod
    def alloc(size):
        return _uniffi_call(_UniFFILib.${buffer_alloc}, size)

    @staticmethod
    def free(buf):
        _uniffi_call(_UniFFILib.${buffer_free}, buf)

    def to_bytes(self):
        if self.len == 0:
            return b""
        return ctypes.string_at(self.data, self.len)


class _ForeignBytes(ctypes.Structure):
    _fields_ = [
        ("len", ctypes.c_int32),
        ("data", ctypes.POINTER(ctypes.c_char)),
    ]


class _NativeStream:
    def __init__(self, data):
        self._data = data
        self._offset = 0

    def remaining(self):
        return len(self._data) - self._offset

    def read(self, size):
        if size > self.remaining():
            raise InternalError(f"Buffer underflow: needed {size} bytes, {self.remaining()} left")
        chunk = self._data[self._offset : self._offset + size]
        self._offset += size
        return chunk

    def unpack(self, fmt):
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))[0]


class _NativeBufferBuilder:
    def __init__(self):
        self._data = bytearray()

    def write(self, data):
        self._data += data

    def pack(self, fmt, value):
        self._data += struct.pack(fmt, value)

    def finalize(self):
        data = bytes(self._data)
        buf = _NativeBuffer.alloc(len(data))
        if data:
            ctypes.memmove(buf.data, data, len(data))
        buf.len = len(data)
        return buf


def _uniffi_lift_buffer(buf, read):
    try:
        stream = _NativeStream(buf.to_bytes())
        value = read(stream)
        if stream.remaining():
            raise InternalError(f"Junk data left in buffer after lifting: {stream.remaining()} bytes")
        return value
    finally:
        _NativeBuffer.free(buf)


def _uniffi_lower_buffer(value, write):
    builder = _NativeBufferBuilder()
    write(value, builder)
    return builder.finalize()


def _uniffi_read_string(stream):
    size = stream.unpack(">i")
    if size < 0:
        raise InternalError(f"Unexpected negative string length: {size}")
    return stream.read(size).decode("utf-8")


def _uniffi_write_string(value, builder):
    data = value.encode("utf-8")
    builder.pack(">i", len(data))
    builder.write(data)


class _UniffiConverterBuffer:
    @classmethod
    def lift(cls, buf):
        return _uniffi_lift_buffer(buf, cls.read)

    @classmethod
    def lower(cls, value):
        return _uniffi_lower_buffer(value, cls.write)


class _UniffiConverterPrimitiveInt:
    _name = ""
    _format = ""
    _min = 0
    _max = 0

    @classmethod
    def check(cls, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"expected int for {cls._name}, got {type(value).__name__}")
        if not cls._min <= value <= cls._max:
            raise ValueError(f"{value} is out of range for {cls._name}")

    @classmethod
    def lift(cls, value):
        return value

    @classmethod
    def lower(cls, value):
        cls.check(value)
        return value

    @classmethod
    def read(cls, stream):
        return stream.unpack(cls._format)

    @classmethod
    def write(cls, value, builder):
        cls.check(value)
        builder.pack(cls._format, value)


class _UniffiConverterPrimitiveFloat:
    _format = ""

    @classmethod
    def check(cls, value):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise TypeError(f"expected float, got {type(value).__name__}")

    @classmethod
    def lift(cls, value):
        return value

    @classmethod
    def lower(cls, value):
        cls.check(value)
        return float(value)

    @classmethod
    def read(cls, stream):
        return stream.unpack(cls._format)

    @classmethod
    def write(cls, value, builder):
        cls.check(value)
        builder.pack(cls._format, float(value))


class _NativeCallStatus(ctypes.Structure):
    _fields_ = [
        ("code", ctypes.c_int8),
        ("error_buf", _NativeBuffer),
    ]

    SUCCESS = 0
    ERROR = 1
    PANIC = 2


def _uniffi_call(fn, *args):
    return _uniffi_call_with_error(None, fn, *args)


def _uniffi_call_with_error(error_converter, fn, *args):
    status = _NativeCallStatus()
    result = fn(*args, ctypes.pointer(status))
    _uniffi_check_call_status(error_converter, status)
    return result


def _uniffi_check_call_status(error_converter, status):
    if status.code == _NativeCallStatus.SUCCESS:
        return
    if status.code == _NativeCallStatus.ERROR:
        if error_converter is None:
            _NativeBuffer.free(status.error_buf)
            raise InternalError("Native call failed with an undeclared error")
        raise error_converter.lift(status.error_buf)
    if status.code == _NativeCallStatus.PANIC:
        if status.error_buf.len > 0:
            message = _uniffi_lift_buffer(status.error_buf, _uniffi_read_string)
        else:
            message = "unknown native panic"
        raise InternalError(message)
    raise InternalError(f"Invalid call status: {status.code}")


class _FFIObject:
    _uniffi_free_symbol = ""

    def __init__(self, pointer):
        self._uniffi_init_pointer(pointer)

    def _uniffi_init_pointer(self, pointer):
        self._pointer = pointer
        self._lock = threading.Lock()
        self._call_counter = 1
        self._destroyed = False

    @classmethod
    def _uniffi_make_instance(cls, pointer):
        instance = cls.__new__(cls)
        instance._uniffi_init_pointer(pointer)
        return instance

    def destroy(self):
        with self._lock:
            if self._destroyed:
                raise ObjectDestroyedError(f"{type(self).__name__} has already been destroyed")
            self._destroyed = True
        self._uniffi_release()

    def _uniffi_release(self):
        with self._lock:
            self._call_counter -= 1
            free = self._call_counter == 0
        if free:
            _uniffi_call(getattr(_UniFFILib, self._uniffi_free_symbol), self._pointer)

    def _uniffi_pointer(self):
        with self._lock:
            if self._destroyed:
                raise ObjectDestroyedError(f"{type(self).__name__} has already been destroyed")
            return self._pointer

    def _uniffi_borrow(self):
        with self._lock:
            if self._destroyed:
                raise ObjectDestroyedError(f"{type(self).__name__} has already been destroyed")
            self._call_counter += 1
        return self._pointer

    def __del__(self):
        lock = self.__dict__.get("_lock")
        if lock is None:
            return
        with lock:
            if self._destroyed:
                return
            self._destroyed = True
        self._uniffi_release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if not self._destroyed:
            self.destroy()


def _uniffi_destroy(*values):
    for value in values:
        if isinstance(value, (list, tuple)):
            _uniffi_destroy(*value)
        elif isinstance(value, dict):
            _uniffi_destroy(*value.values())
        elif hasattr(value, "destroy"):
            value.destroy()


_UNIFFI_ACTIVE_SCOPE = threading.local()


class _UniffiCallScope:
    \"\"\"Owns what the arguments of one native call hold until the call returns.

    Buffers lowered for the call are freed if the call never happens.
    Objects lowered for the call, also those nested inside other values,
    stay borrowed until the call has returned, so a concurrent destroy()
    cannot free them while native code uses them.
    \"\"\"

    def __init__(self):
        self._buffers = []
        self._borrowed = []
        self._called = False
        self._parent = None

    def __enter__(self):
        self._parent = getattr(_UNIFFI_ACTIVE_SCOPE, "current", None)
        _UNIFFI_ACTIVE_SCOPE.current = self
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        _UNIFFI_ACTIVE_SCOPE.current = self._parent
        if not self._called:
            buffers, self._buffers = self._buffers, []
            for buf in buffers:
                _NativeBuffer.free(buf)
        borrowed, self._borrowed = self._borrowed, []
        for obj in reversed(borrowed):
            obj._uniffi_release()

    def track(self, value):
        if isinstance(value, _NativeBuffer):
            self._buffers.append(value)
        return value

    def borrow(self, obj):
        pointer = obj._uniffi_borrow()
        self._borrowed.append(obj)
        return pointer

    def call(self, error_converter, fn, *args):
        self._called = True
        return _uniffi_call_with_error(error_converter, fn, *args)


def _uniffi_lower_object(obj):
    scope = getattr(_UNIFFI_ACTIVE_SCOPE, "current", None)
    if scope is None:
        return obj._uniffi_pointer()
    return scope.borrow(obj)


_UNIFFI_FOREIGN_CALLBACK_T = ctypes.CFUNCTYPE(
    ctypes.c_int32,
    ctypes.c_uint64,
    ctypes.c_int32,
    _NativeBuffer,
    ctypes.POINTER(_NativeBuffer),
)


class _UniffiHandleMap:
    def __init__(self):
        self._lock = threading.Lock()
        self._objects = {}
        self._last_handle = 0

    def insert(self, obj):
        with self._lock:
            self._last_handle += 1
            self._objects[self._last_handle] = obj
            return self._last_handle

    def get(self, handle):
        with self._lock:
            try:
                return self._objects[handle]
            except KeyError as exc:
                raise InternalError(f"Unknown callback handle: {handle}") from exc

    def remove(self, handle):
        with self._lock:
            self._objects.pop(handle, None)

    def __len__(self):
        with self._lock:
            return len(self._objects)


class _UniffiCallbackInterface:
    SUCCESS = 0
    ERROR = 1
    UNEXPECTED_ERROR = 2

    def __init__(self, init_symbol):
        self._init_symbol = init_symbol
        self._handle_map = _UniffiHandleMap()
        self._foreign_callback = _UNIFFI_FOREIGN_CALLBACK_T(self._invoke)
        self._methods = ()

    def register(self, lib):
        getattr(lib, self._init_symbol)(self._foreign_callback)

    def lift(self, handle):
        return self._handle_map.get(handle)

    def lower(self, obj):
        return self._handle_map.insert(obj)

    def read(self, stream):
        return self.lift(stream.unpack(">Q"))

    def write(self, obj, builder):
        builder.pack(">Q", self.lower(obj))

    def _invoke(self, handle, method, args, out_buf):
        if method == 0:
            self._handle_map.remove(handle)
            return self.SUCCESS
        if not 1 <= method <= len(self._methods):
            _NativeBuffer.free(args)
            out_buf[0] = _uniffi_lower_buffer(f"Invalid callback method index: {method}", _uniffi_write_string)
            return self.UNEXPECTED_ERROR
        try:
            code, result = self._methods[method - 1](handle, args)
        except Exception as exc:
            out_buf[0] = _uniffi_lower_buffer(f"{type(exc).__name__}: {exc}", _uniffi_write_string)
            return self.UNEXPECTED_ERROR
        if result is not None:
            out_buf[0] = result
        return code


_UNIFFI_CALLBACK_INTERFACES = {}


class _LazyLibrary:
    \"\"\"Loads the native library on first use and registers every callback interface.\"\"\"

    def __init__(self, name):
        self._name = name
        self._lib = None

    def __getattr__(self, attr):
        if attr.startswith("__"):
            raise AttributeError(attr)
        return getattr(self._load(), attr)

    def install(self, lib):
        \"\"\"Use *lib* as the native library, e.g. an already loaded or stand-in library.\"\"\"
        self._install(lib)

    def _load(self):
        if self._lib is None:
            path = ctypes.util.find_library(self._name)
            if path is None:
                raise InternalError(f"Unable to locate native library '{self._name}'")
            lib = ctypes.CDLL(path)
            _uniffi_declare_ffi(lib)
            self._install(lib)
        return self._lib

    def _install(self, lib):
        self._lib = lib
        for interface in _UNIFFI_CALLBACK_INTERFACES.values():
            interface.register(lib)


def _uniffi_declare_ffi(lib):
${ffi_declarations}


_UniFFILib = _LazyLibrary("${cdylib}")
"""
