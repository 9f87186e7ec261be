# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Kotlin code types for the primitive (leaf) types.

Unsigned integers are exposed as Kotlin's experimental ``UByte`` .. ``ULong``
but cross the boundary in the signed slot of the same width, since neither
JNA nor ``java.nio.ByteBuffer`` know about unsigned types.
"""

from __future__ import annotations

from ffigen.bindings.backend import CodeType, GenerationError, LanguageOracle
from ffigen.bindings.kotlin.converters import HelperFunctionCodeType, InternalsCodeType, annotated
from ffigen.bindings.literals import number_text, numeric_type
from ffigen.bindings.templating import render
from ffigen.model.literals import (
    BooleanLiteral,
    FloatLiteral,
    IntLiteral,
    LiteralValue,
    Radix,
    StringLiteral,
    UIntLiteral,
)
from ffigen.model.types import (
    FLOAT_TYPES,
    INTEGER_TYPES,
    UNSIGNED_TYPES,
    PrimitiveType,
    primitive_canonical_name,
)

# ###############
# Public Interface
# ###############


def typed_number(literal: IntLiteral | UIntLiteral | FloatLiteral) -> str:
    """Render a numeric literal with the Kotlin suffix of its type.

    ``Int8`` to ``Int32`` and ``Float64`` need none, ``Int64`` takes ``L``,
    ``UInt8`` to ``UInt32`` take ``u``, ``UInt64`` takes ``uL`` and
    ``Float32`` takes ``f``.
    """
    p = numeric_type(literal)
    text = number_text(literal)
    if p in FLOAT_TYPES and not isinstance(literal, FloatLiteral):
        # Kotlin does not widen integer constants to floating point
        if literal.radix is not Radix.DECIMAL:
            return f"{text}.to{_NUMERIC_LAYOUTS[p][0]}()"
        text += ".0"
    return text + _LITERAL_SUFFIXES.get(p, "")


class NumericCodeType(InternalsCodeType):
    """Fixed-width integer or float passed directly in its ABI slot."""

    def __init__(self, primitive: PrimitiveType) -> None:
        self.primitive = primitive

    def type_label(self, oracle: LanguageOracle) -> str:
        return _NUMERIC_LAYOUTS[self.primitive][0]

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return primitive_canonical_name(self.primitive)

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, (IntLiteral, UIntLiteral, FloatLiteral)):
            return typed_number(literal)
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        label, ffi_label, getter, putter, from_ffi, to_ffi = _NUMERIC_LAYOUTS[self.primitive]
        code = render(
            _NUMERIC_TEMPLATE,
            internals=self.internals(oracle),
            label=label,
            ffi_label=ffi_label,
            getter=getter,
            putter=putter,
            from_ffi=from_ffi,
            to_ffi=to_ffi,
        )
        return annotated(code, self.primitive in UNSIGNED_TYPES)


class BooleanCodeType(InternalsCodeType):
    def type_label(self, oracle: LanguageOracle) -> str:
        return "Boolean"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Boolean"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, BooleanLiteral):
            return "true" if literal.value else "false"
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_BOOLEAN_TEMPLATE, internals=self.internals(oracle))


class StringCodeType(InternalsCodeType):
    def type_label(self, oracle: LanguageOracle) -> str:
        return "String"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "String"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, StringLiteral):
            return kotlin_string(literal.value)
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_STRING_TEMPLATE, internals=self.internals(oracle))


class TimestampCodeType(HelperFunctionCodeType):
    def type_label(self, oracle: LanguageOracle) -> str:
        return "java.time.Instant"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Timestamp"

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_TIMESTAMP_TEMPLATE, name=self.canonical_name(oracle), label=self.type_label(oracle))

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return ["java.time.DateTimeException"]


class DurationCodeType(HelperFunctionCodeType):
    def type_label(self, oracle: LanguageOracle) -> str:
        return "java.time.Duration"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Duration"

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_DURATION_TEMPLATE, name=self.canonical_name(oracle), label=self.type_label(oracle))

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return ["java.time.DateTimeException"]


def primitive_code_type(primitive: PrimitiveType) -> CodeType:
    if primitive in INTEGER_TYPES or primitive in FLOAT_TYPES:
        return NumericCodeType(primitive)
    if primitive is PrimitiveType.BOOLEAN:
        return BooleanCodeType()
    if primitive is PrimitiveType.STRING:
        return StringCodeType()
    if primitive is PrimitiveType.TIMESTAMP:
        return TimestampCodeType()
    if primitive is PrimitiveType.DURATION:
        return DurationCodeType()
    raise GenerationError(f"Unsupported primitive type '{primitive.value}'")


def kotlin_string(value: str) -> str:
    """A double-quoted Kotlin string literal for *value*."""
    escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in value)
    return f'"{escaped}"'


# ################
# Implementation
# ################

_LITERAL_SUFFIXES: dict[PrimitiveType, str] = {
    PrimitiveType.INT64: "L",
    PrimitiveType.UINT8: "u",
    PrimitiveType.UINT16: "u",
    PrimitiveType.UINT32: "u",
    PrimitiveType.UINT64: "uL",
    PrimitiveType.FLOAT32: "f",
}

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "$": "\\$",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

# label, FFI label, ByteBuffer getter, NativeBufferBuilder putter, lift suffix, lower suffix
_NUMERIC_LAYOUTS: dict[PrimitiveType, tuple[str, str, str, str, str, str]] = {
    PrimitiveType.INT8: ("Byte", "Byte", "get", "putByte", "", ""),
    PrimitiveType.UINT8: ("UByte", "Byte", "get", "putByte", ".toUByte()", ".toByte()"),
    PrimitiveType.INT16: ("Short", "Short", "getShort", "putShort", "", ""),
    PrimitiveType.UINT16: ("UShort", "Short", "getShort", "putShort", ".toUShort()", ".toShort()"),
    PrimitiveType.INT32: ("Int", "Int", "getInt", "putInt", "", ""),
    PrimitiveType.UINT32: ("UInt", "Int", "getInt", "putInt", ".toUInt()", ".toInt()"),
    PrimitiveType.INT64: ("Long", "Long", "getLong", "putLong", "", ""),
    PrimitiveType.UINT64: ("ULong", "Long", "getLong", "putLong", ".toULong()", ".toLong()"),
    PrimitiveType.FLOAT32: ("Float", "Float", "getFloat", "putFloat", "", ""),
    PrimitiveType.FLOAT64: ("Double", "Double", "getDouble", "putDouble", "", ""),
}

_NUMERIC_TEMPLATE = """\
internal object ${internals} {
    fun lift(v: ${ffi_label}): ${label} {
        return v${from_ffi}
    }

    fun read(buf: ByteBuffer): ${label} {
        return buf.${getter}()${from_ffi}
    }

    fun lower(v: ${label}): ${ffi_label} {
        return v${to_ffi}
    }

    fun write(v: ${label}, buf: NativeBufferBuilder) {
        buf.${putter}(v${to_ffi})
    }
}"""

_BOOLEAN_TEMPLATE = """\
internal object ${internals} {
    fun lift(v: Byte): Boolean {
        return when (v.toInt()) {
            0 -> false
            1 -> true
            else -> throw InternalException("Unexpected byte for Boolean: " + v)
        }
    }

    fun read(buf: ByteBuffer): Boolean {
        return ${internals}.lift(buf.get())
    }

    fun lower(v: Boolean): Byte {
        return if (v) 1.toByte() else 0.toByte()
    }

    fun write(v: Boolean, buf: NativeBufferBuilder) {
        buf.putByte(${internals}.lower(v))
    }
}"""

_STRING_TEMPLATE = """\
internal object ${internals} {
    fun lift(rbuf: NativeBuffer.ByValue): String {
        return liftFromNativeBuffer(rbuf) { buf -> readNativeString(buf) }
    }

    fun read(buf: ByteBuffer): String {
        return readNativeString(buf)
    }

    fun lower(v: String): NativeBuffer.ByValue {
        return lowerNativeString(v)
    }

    fun write(v: String, buf: NativeBufferBuilder) {
        writeNativeString(v, buf)
    }
}"""

_TIMESTAMP_TEMPLATE = """\
internal fun lift${name}(rbuf: NativeBuffer.ByValue): ${label} {
    return liftFromNativeBuffer(rbuf) { buf ->
        read${name}(buf)
    }
}

internal fun read${name}(buf: ByteBuffer): ${label} {
    val seconds = buf.getLong()
    // Read as a signed Int but always in 0 until 1_000_000_000 on the wire
    val nanoseconds = buf.getInt().toLong()
    if (nanoseconds < 0) {
        throw DateTimeException("Instant nanoseconds exceed minimum or maximum supported by ffigen")
    }
    if (seconds >= 0) {
        return java.time.Instant.EPOCH.plus(java.time.Duration.ofSeconds(seconds, nanoseconds))
    } else {
        return java.time.Instant.EPOCH.minus(java.time.Duration.ofSeconds(-seconds, nanoseconds))
    }
}

internal fun lower${name}(v: ${label}): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(v) { v, buf ->
        write${name}(v, buf)
    }
}

internal fun write${name}(v: ${label}, buf: NativeBufferBuilder) {
    var epochOffset = java.time.Duration.between(java.time.Instant.EPOCH, v)
    var sign = 1
    if (epochOffset.isNegative()) {
        sign = -1
        epochOffset = epochOffset.negated()
    }
    buf.putLong(sign * epochOffset.seconds)
    buf.putInt(epochOffset.nano)
}"""

_DURATION_TEMPLATE = """\
internal fun lift${name}(rbuf: NativeBuffer.ByValue): ${label} {
    return liftFromNativeBuffer(rbuf) { buf ->
        read${name}(buf)
    }
}

internal fun read${name}(buf: ByteBuffer): ${label} {
    // Seconds are a u64 on the wire; values above Long.MAX_VALUE read as negative
    val seconds = buf.getLong()
    val nanoseconds = buf.getInt().toLong()
    if (seconds < 0) {
        throw DateTimeException("Duration exceeds minimum or maximum value supported by ffigen")
    }
    if (nanoseconds < 0) {
        throw DateTimeException("Duration nanoseconds exceed minimum or maximum supported by ffigen")
    }
    return ${label}.ofSeconds(seconds, nanoseconds)
}

internal fun lower${name}(v: ${label}): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(v) { v, buf ->
        write${name}(v, buf)
    }
}

internal fun write${name}(v: ${label}, buf: NativeBufferBuilder) {
    if (v.isNegative()) {
        throw IllegalArgumentException("Invalid duration, must be non-negative")
    }
    buf.putLong(v.seconds)
    buf.putInt(v.nano)
}"""
