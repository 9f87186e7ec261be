# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Records in the Kotlin target: ``data class`` values with ``lower``/``write``
methods and ``lift``/``read`` on the companion object."""

from __future__ import annotations

from collections.abc import Sequence

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.kotlin.converters import MemberCodeType, annotated
from ffigen.bindings.templating import indent, render
from ffigen.model.entities import ArgumentDef, ComponentInterface, FieldDef, RecordDef
from ffigen.model.metadata import (
    contains_object_references,
    record_contains_object_references,
    record_contains_unsigned_types,
)
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class RecordCodeType(MemberCodeType):
    def __init__(self, inner: RecordDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Record" + self.type_label(oracle)


class KotlinRecord(MemberDeclaration):
    kind = "record"

    def __init__(self, inner: RecordDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.contains_unsigned_types = record_contains_unsigned_types(ci, inner)
        self.contains_object_references = record_contains_object_references(ci, inner)
        self._ci = ci

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        class_name = oracle.class_name(self.inner.name)
        fields = self.inner.fields
        if fields:
            header = f"data class {class_name} (\n{indent(parameter_list(oracle, fields, 'var'), 1)}\n)"
        else:
            header = f"class {class_name}"
        if self.contains_object_references:
            header += " : Disposable"
        members = []
        if self.contains_object_references:
            members.append(destroy_override(oracle, self._ci, fields, "this."))
        members.append(
            render(
                _COMPANION_TEMPLATE,
                class_name=class_name,
                construct=construct_from_buffer(oracle, class_name, fields),
            )
        )
        members.append(
            render(
                _WRITE_TEMPLATE,
                write_fields=indent(write_fields(oracle, fields, "this."), 1),
            )
        )
        code = header + " {\n" + indent("\n\n".join(members), 1) + "\n}"
        return annotated(code, self.contains_unsigned_types)


def parameter_list(
    oracle: LanguageOracle,
    params: Sequence[ArgumentDef | FieldDef],
    keyword: str = "",
    *,
    defaults: bool = True,
) -> str:
    """Comma-separated ``name: Type = default`` declarations, one per line.

    Overriding functions may not repeat default values, so *defaults* can be
    switched off for them.
    """
    prefix = f"{keyword} " if keyword else ""
    lines = []
    for param in params:
        text = f"{prefix}{oracle.var_name(param.name)}: {oracle.type_label(param.type)}"
        if defaults and param.default is not None:
            text += f" = {oracle.literal(param.default, param.type)}"
        lines.append(text)
    return ",\n".join(lines)


def construct_from_buffer(oracle: LanguageOracle, class_name: str, fields: Sequence[FieldDef]) -> str:
    """A constructor call reading every field of *fields* from ``buf``."""
    if not fields:
        return f"{class_name}()"
    reads = ",\n".join(oracle.read("buf", f.type) for f in fields)
    return f"{class_name}(\n{indent(reads, 1)}\n)"


def write_fields(oracle: LanguageOracle, fields: Sequence[FieldDef], owner: str) -> str:
    lines = [oracle.write(owner + oracle.var_name(f.name), "buf", f.type) for f in fields]
    return "\n".join(lines) if lines else "// No fields to write"


def destroy_override(oracle: LanguageOracle, ci: ComponentInterface, fields: Sequence[FieldDef], owner: str) -> str:
    """An ``override fun destroy()`` destroying the objects held by *fields*."""
    held = [owner + oracle.var_name(f.name) for f in fields if contains_object_references(ci, [f.type])]
    body = f"Disposable.destroy({', '.join(held)})" if held else "// Nothing to destroy"
    return "\n".join(
        [
            '@Suppress("UNNECESSARY_SAFE_CALL")',
            "override fun destroy() {",
            indent(body, 1),
            "}",
        ]
    )


# ################
# Implementation
# ################

_COMPANION_TEMPLATE = """\
companion object {
    internal fun lift(rbuf: NativeBuffer.ByValue): ${class_name} {
        return liftFromNativeBuffer(rbuf) { buf -> ${class_name}.read(buf) }
    }

    internal fun read(buf: ByteBuffer): ${class_name} {
        return ${construct}
    }
}"""

_WRITE_TEMPLATE = """\
internal fun lower(): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(this) { v, buf -> v.write(buf) }
}

internal fun write(buf: NativeBufferBuilder) {
${write_fields}
}"""
