# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Kotlin code types for Optional, Sequence and Map.

Each compound renders four top-level helper functions named after its
canonical name. The element handling is delegated to the inner code type,
so nesting composes: ``writeSequenceOptionalString`` calls
``writeOptionalString``, which calls ``StringInternals.write``.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle
from ffigen.bindings.kotlin.converters import HelperFunctionCodeType
from ffigen.bindings.templating import indent, render
from ffigen.model.literals import EmptyMapLiteral, EmptySequenceLiteral, LiteralValue, NullLiteral
from ffigen.model.metadata import contains_unsigned_types
from ffigen.model.types import STRING_TYPE, TypeRef

# ###############
# Public Interface
# ###############


class CompoundCodeType(HelperFunctionCodeType):
    prefix = ""
    template = ""

    def __init__(self, inner: TypeRef, outer: TypeRef) -> None:
        self.inner = inner
        self.outer = outer

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return self.prefix + oracle.find(self.inner).canonical_name(oracle)

    def helper_code(self, oracle: LanguageOracle) -> str:
        annotation = "@ExperimentalUnsignedTypes\n" if contains_unsigned_types(oracle.ci, [self.outer]) else ""
        return render(
            self.template,
            annotation=annotation,
            name=self.canonical_name(oracle),
            label=self.type_label(oracle),
            inner_label=oracle.type_label(self.inner),
            write_item=indent(oracle.write("v", "buf", self.inner), 2),
            write_element=indent(oracle.write("it", "buf", self.inner), 2),
            write_key=indent(oracle.write("k", "buf", STRING_TYPE), 2),
            read_item=oracle.read("buf", self.inner),
            read_key=oracle.read("buf", STRING_TYPE),
        )


class OptionalCodeType(CompoundCodeType):
    """``u8`` presence tag (0 or 1), then the value when present."""

    prefix = "Optional"
    template = """\
${annotation}internal fun lift${name}(rbuf: NativeBuffer.ByValue): ${label} {
    return liftFromNativeBuffer(rbuf) { buf ->
        read${name}(buf)
    }
}

${annotation}internal fun read${name}(buf: ByteBuffer): ${label} {
    return when (buf.get().toInt()) {
        0 -> null
        1 -> ${read_item}
        else -> throw InternalException("Unexpected optional tag")
    }
}

${annotation}internal fun lower${name}(v: ${label}): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(v) { v, buf ->
        write${name}(v, buf)
    }
}

${annotation}internal fun write${name}(v: ${label}, buf: NativeBufferBuilder) {
    if (v == null) {
        buf.putByte(0)
    } else {
        buf.putByte(1)
${write_item}
    }
}"""

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.type_label(self.inner) + "?"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, NullLiteral):
            return "null"
        return oracle.literal(literal, self.inner)


class SequenceCodeType(CompoundCodeType):
    """``i32`` element count, then each element in order."""

    prefix = "Sequence"
    template = """\
${annotation}internal fun lift${name}(rbuf: NativeBuffer.ByValue): ${label} {
    return liftFromNativeBuffer(rbuf) { buf ->
        read${name}(buf)
    }
}

${annotation}internal fun read${name}(buf: ByteBuffer): ${label} {
    val len = buf.getInt()
    if (len < 0) {
        throw InternalException("Unexpected negative sequence length")
    }
    return List<${inner_label}>(len) {
        ${read_item}
    }
}

${annotation}internal fun lower${name}(v: ${label}): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(v) { v, buf ->
        write${name}(v, buf)
    }
}

${annotation}internal fun write${name}(v: ${label}, buf: NativeBufferBuilder) {
    buf.putInt(v.size)
    v.forEach {
${write_element}
    }
}"""

    def type_label(self, oracle: LanguageOracle) -> str:
        return f"List<{oracle.type_label(self.inner)}>"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, EmptySequenceLiteral):
            return "listOf()"
        return super().literal(oracle, literal)


class MapCodeType(CompoundCodeType):
    """``i32`` entry count, then each string key followed by its value."""

    prefix = "Map"
    template = """\
${annotation}internal fun lift${name}(rbuf: NativeBuffer.ByValue): ${label} {
    return liftFromNativeBuffer(rbuf) { buf ->
        read${name}(buf)
    }
}

${annotation}internal fun read${name}(buf: ByteBuffer): ${label} {
    val len = buf.getInt()
    if (len < 0) {
        throw InternalException("Unexpected negative map length")
    }
    val items : MutableMap<String, ${inner_label}> = mutableMapOf()
    repeat(len) {
        val k = ${read_key}
        val v = ${read_item}
        items[k] = v
    }
    return items
}

${annotation}internal fun lower${name}(v: ${label}): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(v) { v, buf ->
        write${name}(v, buf)
    }
}

${annotation}internal fun write${name}(v: ${label}, buf: NativeBufferBuilder) {
    buf.putInt(v.size)
    // Destructuring with parentheses selects the Map.Entry overload
    v.forEach { (k, v) ->
${write_key}
${write_item}
    }
}"""

    def type_label(self, oracle: LanguageOracle) -> str:
        return f"Map<String, {oracle.type_label(self.inner)}>"

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if isinstance(literal, EmptyMapLiteral):
            return "mapOf()"
        return super().literal(oracle, literal)
