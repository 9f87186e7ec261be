# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Python code types for Optional, Sequence and Map.

Each handler is parameterized by the code type of its inner type, resolved
through the oracle, so arbitrarily nested compounds compose without any
special cases: the converter of ``Sequence<Optional<T>>`` calls the
converter of ``Optional<T>``, which calls the converter of ``T``.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle
from ffigen.bindings.python.converters import ConverterCodeType, converter_name
from ffigen.bindings.templating import render
from ffigen.model.literals import EmptyMapLiteral, EmptySequenceLiteral, LiteralValue, NullLiteral
from ffigen.model.types import STRING_TYPE, TypeRef

# ###############
# Public Interface
# ###############


class CompoundCodeType(ConverterCodeType):
    """Base for handlers generic over one inner type."""

    prefix = ""

    def __init__(self, inner: TypeRef, outer: TypeRef) -> None:
        self.inner = inner
        self.outer = outer

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return self.prefix + oracle.find(self.inner).canonical_name(oracle)

    def inner_label(self, oracle: LanguageOracle) -> str:
        return oracle.type_label(self.inner)


class OptionalCodeType(CompoundCodeType):
    """``u8`` presence tag (0 or 1), then the value when present."""

    prefix = "Optional"

    def type_label(self, oracle: LanguageOracle) -> str:
        return f"{self.inner_label(oracle)} | None"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, NullLiteral):
            return "None"
        return oracle.literal(literal, self.inner)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(
            _OPTIONAL_TEMPLATE,
            converter=self.converter(oracle),
            inner=converter_name(oracle, self.inner),
        )


class SequenceCodeType(CompoundCodeType):
    """``i32`` element count, then each element in order."""

    prefix = "Sequence"

    def type_label(self, oracle: LanguageOracle) -> str:
        return f"list[{self.inner_label(oracle)}]"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, EmptySequenceLiteral):
            return "[]"
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(
            _SEQUENCE_TEMPLATE,
            converter=self.converter(oracle),
            inner=converter_name(oracle, self.inner),
        )


class MapCodeType(CompoundCodeType):
    """``i32`` entry count, then each string key followed by its value."""

    prefix = "Map"

    def type_label(self, oracle: LanguageOracle) -> str:
        return f"dict[str, {self.inner_label(oracle)}]"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, EmptyMapLiteral):
            return "{}"
        return super().literal(oracle, literal)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(
            _MAP_TEMPLATE,
            converter=self.converter(oracle),
            key=converter_name(oracle, STRING_TYPE),
            inner=converter_name(oracle, self.inner),
        )


# ################
# Implementation
# ################

_OPTIONAL_TEMPLATE = """\
class ${converter}(_UniffiConverterBuffer):
    @staticmethod
    def read(stream):
        tag = stream.unpack(">B")
        if tag == 0:
            return None
        if tag == 1:
            return ${inner}.read(stream)
        raise InternalError(f"Unexpected optional tag: {tag}")

    @staticmethod
    def write(value, builder):
        if value is None:
            builder.pack(">B", 0)
            return
        builder.pack(">B", 1)
        ${inner}.write(value, builder)"""

_SEQUENCE_TEMPLATE = """\
class ${converter}(_UniffiConverterBuffer):
    @staticmethod
    def read(stream):
        count = stream.unpack(">i")
        if count < 0:
            raise InternalError(f"Unexpected negative sequence length: {count}")
        return [${inner}.read(stream) for _ in range(count)]

    @staticmethod
    def write(value, builder):
        builder.pack(">i", len(value))
        for item in value:
            ${inner}.write(item, builder)"""

_MAP_TEMPLATE = """\
class ${converter}(_UniffiConverterBuffer):
    @staticmethod
    def read(stream):
        count = stream.unpack(">i")
        if count < 0:
            raise InternalError(f"Unexpected negative map length: {count}")
        items = {}
        for _ in range(count):
            key = ${key}.read(stream)
            items[key] = ${inner}.read(stream)
        return items

    @staticmethod
    def write(value, builder):
        builder.pack(">i", len(value))
        for key, item in value.items():
            ${key}.write(key, builder)
            ${inner}.write(item, builder)"""
