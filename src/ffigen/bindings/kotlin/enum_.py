# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Enums in the Kotlin target.

A flat enum becomes an ``enum class`` whose ordinal plus one is the wire
discriminant. An enum with data becomes a ``sealed class`` with one nested
``data class`` (or ``object`` for a variant without fields) per variant.
The dispatch helpers here are shared with errors.
"""

from __future__ import annotations

from collections.abc import Sequence

from ffigen.bindings.backend import GenerationError, LanguageOracle, MemberDeclaration
from ffigen.bindings.kotlin.converters import MemberCodeType, annotated
from ffigen.bindings.kotlin.record import construct_from_buffer, parameter_list, write_fields
from ffigen.bindings.templating import indent, render
from ffigen.model.entities import ComponentInterface, EnumDef, VariantDef
from ffigen.model.literals import EnumLiteral, LiteralValue
from ffigen.model.metadata import (
    contains_object_references,
    enum_contains_object_references,
    enum_contains_unsigned_types,
)
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class EnumCodeType(MemberCodeType):
    """``i32`` 1-based discriminant, then the fields of the variant."""

    def __init__(self, inner: EnumDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Enum" + self.type_label(oracle)

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        if not isinstance(literal, EnumLiteral):
            return super().literal(oracle, literal)
        variant = next((v for v in self.inner.variants if v.name == literal.variant), None)
        if variant is None:
            raise GenerationError(
                f"Enum has no variant '{literal.variant}'",
                entity=self.canonical_name(oracle),
            )
        if variant.has_fields:
            raise GenerationError(
                f"Variant '{variant.name}' carries fields and has no literal syntax",
                entity=self.canonical_name(oracle),
            )
        return f"{self.type_label(oracle)}.{variant_name(oracle, self.inner, variant)}"


class KotlinEnum(MemberDeclaration):
    kind = "enum"

    def __init__(self, inner: EnumDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.contains_unsigned_types = enum_contains_unsigned_types(ci, inner)
        self.contains_object_references = enum_contains_object_references(ci, inner)
        self._ci = ci

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        class_name = oracle.class_name(self.inner.name)
        if self.inner.is_flat:
            return self._flat_code(oracle, class_name)
        variants = self.inner.variants
        names = [variant_name(oracle, self.inner, v) for v in variants]
        declarations = []
        for name, variant in zip(names, variants, strict=True):
            if variant.has_fields:
                params = parameter_list(oracle, variant.fields, "val")
                declarations.append(f"data class {name}(\n{indent(params, 1)}\n) : {class_name}()")
            else:
                declarations.append(f"object {name} : {class_name}()")
        header = f"sealed class {class_name}"
        members = ["\n".join(declarations)]
        if self.contains_object_references:
            header += " : Disposable"
            members.append(destroy_variants(oracle, self._ci, class_name, names, variants))
        members.append(
            sealed_companion(
                "companion object",
                class_name,
                read_variants(oracle, class_name, names, variants, new=""),
            )
        )
        members.append(sealed_write(write_variants(oracle, class_name, names, variants)))
        code = header + " {\n" + indent("\n\n".join(members), 1) + "\n}"
        return annotated(code, self.contains_unsigned_types)

    def _flat_code(self, oracle: LanguageOracle, class_name: str) -> str:
        entries = ", ".join(oracle.enum_variant_name(v.name) for v in self.inner.variants)
        return render(_FLAT_TEMPLATE, class_name=class_name, entries=entries)


def variant_name(oracle: LanguageOracle, definition: EnumDef, variant: VariantDef) -> str:
    """Flat enums use constant names; sealed-class variants use class names."""
    if definition.is_flat:
        return oracle.enum_variant_name(variant.name)
    return oracle.class_name(variant.name)


def read_variants(
    oracle: LanguageOracle,
    class_name: str,
    names: Sequence[str],
    variants: Sequence[VariantDef],
    *,
    new: str,
) -> str:
    """A ``when`` over the discriminant constructing the selected variant.

    Args:
        new: Appended to field-less variant names; ``"()"`` for classes,
            empty for ``object`` declarations.
    """
    lines = ["return when (buf.getInt()) {"]
    for index, (name, variant) in enumerate(zip(names, variants, strict=True), 1):
        qualified = f"{class_name}.{name}"
        if variant.has_fields:
            lines.append(indent(f"{index} -> {construct_from_buffer(oracle, qualified, variant.fields)}", 1))
        else:
            lines.append(f"    {index} -> {qualified}{new}")
    lines.append(f'    else -> throw InternalException("Unexpected {class_name} discriminant")')
    lines.append("}")
    return "\n".join(lines)


def write_variants(
    oracle: LanguageOracle, class_name: str, names: Sequence[str], variants: Sequence[VariantDef]
) -> str:
    lines = ["when (this) {"]
    for index, (name, variant) in enumerate(zip(names, variants, strict=True), 1):
        lines.append(f"    is {class_name}.{name} -> {{")
        lines.append(f"        buf.putInt({index})")
        if variant.fields:
            lines.append(indent(write_fields(oracle, variant.fields, "this."), 2))
        lines.append("    }")
    lines.append("}.let { /* when statements must be exhaustive */ }")
    return "\n".join(lines)


def sealed_companion(companion: str, class_name: str, read_code: str, *, lift_modifier: str = "internal") -> str:
    """The companion object holding ``lift`` and ``read`` of a sealed class."""
    return render(
        _COMPANION_TEMPLATE,
        companion=companion,
        class_name=class_name,
        lift_modifier=lift_modifier,
        read_variants=indent(read_code, 2),
    )


def sealed_write(write_code: str) -> str:
    return render(_WRITE_TEMPLATE, write_variants=indent(write_code, 1))

def destroy_variants(
    oracle: LanguageOracle,
    ci: ComponentInterface,
    class_name: str,
    names: Sequence[str],
    variants: Sequence[VariantDef],
) -> str:
    """An ``override fun destroy()`` destroying the objects held by the current variant."""
    lines = ['@Suppress("UNNECESSARY_SAFE_CALL")', "override fun destroy() {", "    when (this) {"]
    for name, variant in zip(names, variants, strict=True):
        held = [f"this.{oracle.var_name(f.name)}" for f in variant.fields if contains_object_references(ci, [f.type])]
        if held:
            lines.append(f"        is {class_name}.{name} -> Disposable.destroy({', '.join(held)})")
        else:
            lines.append(f"        is {class_name}.{name} -> {{ }}")
    lines.append("    }.let { /* when statements must be exhaustive */ }")
    lines.append("}")
    return "\n".join(lines)


# ################
# Implementation
# ################

_FLAT_TEMPLATE = """\
enum class ${class_name} {
    ${entries};

    companion object {
        internal fun lift(rbuf: NativeBuffer.ByValue): ${class_name} {
            return liftFromNativeBuffer(rbuf) { buf -> ${class_name}.read(buf) }
        }

        internal fun read(buf: ByteBuffer): ${class_name} {
            try {
                return values()[buf.getInt() - 1]
            } catch (e: IndexOutOfBoundsException) {
                throw InternalException("Unexpected ${class_name} discriminant")
            }
        }
    }

    internal fun lower(): NativeBuffer.ByValue {
        return lowerIntoNativeBuffer(this) { v, buf -> v.write(buf) }
    }

    internal fun write(buf: NativeBufferBuilder) {
        buf.putInt(this.ordinal + 1)
    }
}"""

_COMPANION_TEMPLATE = """\
${companion} {
    ${lift_modifier} fun lift(rbuf: NativeBuffer.ByValue): ${class_name} {
        return liftFromNativeBuffer(rbuf) { buf -> ${class_name}.read(buf) }
    }

    internal fun read(buf: ByteBuffer): ${class_name} {
${read_variants}
    }
}"""

_WRITE_TEMPLATE = """\
internal fun lower(): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(this) { v, buf -> v.write(buf) }
}

internal fun write(buf: NativeBufferBuilder) {
${write_variants}
}"""
