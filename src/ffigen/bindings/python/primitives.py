# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Python code types for the primitive (leaf) types.

Integers, floats and booleans pass the native boundary directly as ctypes
scalars. Strings, timestamps and durations are serialized into a buffer.
"""

from __future__ import annotations

from ffigen.bindings.backend import CodeType, GenerationError, LanguageOracle
from ffigen.bindings.literals import number_text, numeric_type
from ffigen.bindings.python.converters import ConverterCodeType
from ffigen.bindings.templating import render
from ffigen.model.literals import BooleanLiteral, FloatLiteral, IntLiteral, LiteralValue, StringLiteral, UIntLiteral
from ffigen.model.types import FLOAT_TYPES, INTEGER_TYPES, PrimitiveType, primitive_canonical_name

# ###############
# Public Interface
# ###############


class IntegerCodeType(ConverterCodeType):
    """Fixed-width signed or unsigned integer, range-checked when lowered."""

    def __init__(self, primitive: PrimitiveType) -> None:
        self.primitive = primitive

    def type_label(self, oracle: LanguageOracle) -> str:
        return "int"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return primitive_canonical_name(self.primitive)

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, (IntLiteral, UIntLiteral, FloatLiteral)):
            numeric_type(literal)
            return number_text(literal)
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        struct_format, minimum, maximum = _INTEGER_LAYOUTS[self.primitive]
        return render(
            _INTEGER_TEMPLATE,
            converter=self.converter(oracle),
            name=self.canonical_name(oracle),
            format=struct_format,
            minimum=minimum,
            maximum=maximum,
        )


class FloatCodeType(ConverterCodeType):
    def __init__(self, primitive: PrimitiveType) -> None:
        self.primitive = primitive

    def type_label(self, oracle: LanguageOracle) -> str:
        return "float"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return primitive_canonical_name(self.primitive)

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, (IntLiteral, UIntLiteral, FloatLiteral)):
            numeric_type(literal)
            return number_text(literal)
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(
            _FLOAT_TEMPLATE,
            converter=self.converter(oracle),
            format=">f" if self.primitive is PrimitiveType.FLOAT32 else ">d",
        )


class BooleanCodeType(ConverterCodeType):
    def type_label(self, oracle: LanguageOracle) -> str:
        return "bool"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Boolean"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, BooleanLiteral):
            return "True" if literal.value else "False"
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_BOOLEAN_TEMPLATE, converter=self.converter(oracle))


class StringCodeType(ConverterCodeType):
    """UTF-8 string, written as an ``i32`` byte length followed by the bytes."""

    def type_label(self, oracle: LanguageOracle) -> str:
        return "str"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "String"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, StringLiteral):
            return repr(literal.value)
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_STRING_TEMPLATE, converter=self.converter(oracle))


class TimestampCodeType(ConverterCodeType):
    """A point in time: ``i64`` seconds since the epoch plus ``u32`` nanoseconds."""

    def type_label(self, oracle: LanguageOracle) -> str:
        return "datetime.datetime"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Timestamp"

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_TIMESTAMP_TEMPLATE, converter=self.converter(oracle))

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return ["import datetime"]


class DurationCodeType(ConverterCodeType):
    """A non-negative span of time: ``u64`` seconds plus ``u32`` nanoseconds."""

    def type_label(self, oracle: LanguageOracle) -> str:
        return "datetime.timedelta"

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Duration"

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_DURATION_TEMPLATE, converter=self.converter(oracle))

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return ["import datetime"]


def primitive_code_type(primitive: PrimitiveType) -> CodeType:
    """Return the fixed code type handling *primitive*."""
    if primitive in INTEGER_TYPES:
        return IntegerCodeType(primitive)
    if primitive in FLOAT_TYPES:
        return FloatCodeType(primitive)
    if primitive is PrimitiveType.BOOLEAN:
        return BooleanCodeType()
    if primitive is PrimitiveType.STRING:
        return StringCodeType()
    if primitive is PrimitiveType.TIMESTAMP:
        return TimestampCodeType()
    if primitive is PrimitiveType.DURATION:
        return DurationCodeType()
    raise GenerationError(f"Unsupported primitive type '{primitive.value}'")


# ################
# Implementation
# ################

_INTEGER_LAYOUTS: dict[PrimitiveType, tuple[str, int, int]] = {
    PrimitiveType.INT8: (">b", -(2**7), 2**7 - 1),
    PrimitiveType.UINT8: (">B", 0, 2**8 - 1),
    PrimitiveType.INT16: (">h", -(2**15), 2**15 - 1),
    PrimitiveType.UINT16: (">H", 0, 2**16 - 1),
    PrimitiveType.INT32: (">i", -(2**31), 2**31 - 1),
    PrimitiveType.UINT32: (">I", 0, 2**32 - 1),
    PrimitiveType.INT64: (">q", -(2**63), 2**63 - 1),
    PrimitiveType.UINT64: (">Q", 0, 2**64 - 1),
}

_INTEGER_TEMPLATE = """\
class ${converter}(_UniffiConverterPrimitiveInt):
    _name = "${name}"
    _format = "${format}"
    _min = ${minimum}
    _max = ${maximum}"""

_FLOAT_TEMPLATE = """\
class ${converter}(_UniffiConverterPrimitiveFloat):
    _format = "${format}"
"""

_BOOLEAN_TEMPLATE = """\
class ${converter}:
    @staticmethod
    def check(value):
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__}")

    @staticmethod
    def lift(value):
        if value not in (0, 1):
            raise InternalError(f"Unexpected byte for Boolean: {value}")
        return value == 1

    @staticmethod
    def lower(value):
        ${converter}.check(value)
        return 1 if value else 0

    @staticmethod
    def read(stream):
        return ${converter}.lift(stream.unpack(">b"))

    @staticmethod
    def write(value, builder):
        builder.pack(">b", ${converter}.lower(value))"""

_STRING_TEMPLATE = """\
class ${converter}(_UniffiConverterBuffer):
    @staticmethod
    def read(stream):
        return _uniffi_read_string(stream)

    @staticmethod
    def write(value, builder):
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        _uniffi_write_string(value, builder)"""

_TIMESTAMP_TEMPLATE = """\
class ${converter}(_UniffiConverterBuffer):
    _EPOCH = datetime.datetime.fromtimestamp(0, tz=datetime.timezone.utc)

    @staticmethod
    def read(stream):
        seconds = stream.unpack(">q")
        microseconds = stream.unpack(">I") // 1000
        if seconds >= 0:
            return ${converter}._EPOCH + datetime.timedelta(seconds=seconds, microseconds=microseconds)
        return ${converter}._EPOCH - datetime.timedelta(seconds=-seconds, microseconds=microseconds)

    @staticmethod
    def write(value, builder):
        if value >= ${converter}._EPOCH:
            sign = 1
            delta = value - ${converter}._EPOCH
        else:
            sign = -1
            delta = ${converter}._EPOCH - value
        seconds = delta.days * 86400 + delta.seconds
        builder.pack(">q", sign * seconds)
        builder.pack(">I", delta.microseconds * 1000)"""

_DURATION_TEMPLATE = """\
class ${converter}(_UniffiConverterBuffer):
    @staticmethod
    def read(stream):
        seconds = stream.unpack(">Q")
        microseconds = stream.unpack(">I") // 1000
        return datetime.timedelta(seconds=seconds, microseconds=microseconds)

    @staticmethod
    def write(value, builder):
        if value < datetime.timedelta(0):
            raise ValueError("Invalid duration, must be non-negative")
        builder.pack(">Q", value.days * 86400 + value.seconds)
        builder.pack(">I", value.microseconds * 1000)"""
