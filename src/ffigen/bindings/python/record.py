# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Records in the Python target: plain classes compared by value.

On the wire a record is the concatenation of its fields in declared order.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.python.converters import ConverterCodeType
from ffigen.bindings.python.function import default_assignments, parameter_list
from ffigen.bindings.templating import block, indent
from ffigen.model.entities import ComponentInterface, FieldDef, RecordDef
from ffigen.model.metadata import contains_object_references, record_contains_object_references
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class RecordCodeType(ConverterCodeType):
    def __init__(self, inner: RecordDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Record" + self.type_label(oracle)

    def helper_code(self, oracle: LanguageOracle) -> str:
        class_name = self.type_label(oracle)
        return "\n".join(
            [
                f"class {self.converter(oracle)}(_UniffiConverterBuffer):",
                "    @staticmethod",
                "    def read(stream):",
                indent(construct_from_stream(oracle, class_name, self.inner.fields), 2),
                "",
                "    @staticmethod",
                "    def write(value, builder):",
                indent(write_fields(oracle, self.inner.fields, "value"), 2),
            ]
        )


class PythonRecord(MemberDeclaration):
    kind = "record"

    def __init__(self, inner: RecordDef, ci: ComponentInterface) -> None:
        self.inner = inner
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
        lines = [f"class {class_name}:"]
        lines.append(indent(value_class_body(oracle, class_name, fields), 1))
        if self.contains_object_references:
            lines.append("")
            lines.append(indent(destroy_method(oracle, self._ci, fields), 1))
        return "\n".join(lines)


def value_class_body(
    oracle: LanguageOracle,
    class_name: str,
    fields: tuple[FieldDef, ...],
    *,
    label: str | None = None,
    init_tail: list[str] | None = None,
) -> str:
    """``__init__``, ``__repr__`` and ``__eq__`` for a class holding *fields*.

    Args:
        oracle: The Python oracle.
        class_name: The class compared against in ``__eq__``.
        fields: The fields, in declared order.
        label: The name shown by ``__repr__``, defaulting to *class_name*.
        init_tail: Extra statements run at the end of ``__init__``.
    """
    names = [oracle.var_name(f.name) for f in fields]
    init = default_assignments(oracle, fields) + [f"self.{nm} = {nm}" for nm in names] + (init_tail or [])
    params = ", ".join(["self"] + parameter_list(oracle, fields))
    shown = ", ".join(f"{nm}={{self.{nm}!r}}" for nm in names)
    mine = ", ".join(f"self.{nm}" for nm in names)
    theirs = ", ".join(f"other.{nm}" for nm in names)
    return "\n".join(
        [
            f"def __init__({params}):",
            indent(block(init, "pass"), 1),
            "",
            "def __repr__(self):",
            f'    return f"{label or class_name}({shown})"',
            "",
            "def __eq__(self, other):",
            f"    if not isinstance(other, {class_name}):",
            "        return NotImplemented",
            f"    return [{mine}] == [{theirs}]",
        ]
    )


def construct_from_stream(oracle: LanguageOracle, class_name: str, fields: tuple[FieldDef, ...]) -> str:
    """A ``return`` statement building *class_name* from fields read off ``stream``."""
    if not fields:
        return f"return {class_name}()"
    args = [f"{oracle.var_name(f.name)}={oracle.read('stream', f.type)}," for f in fields]
    return "\n".join([f"return {class_name}(", indent("\n".join(args), 1), ")"])


def write_fields(oracle: LanguageOracle, fields: tuple[FieldDef, ...], value: str) -> str:
    lines = [oracle.write(f"{value}.{oracle.var_name(f.name)}", "builder", f.type) for f in fields]
    return block(lines, "pass")


def destroy_method(oracle: LanguageOracle, ci: ComponentInterface, fields: tuple[FieldDef, ...]) -> str:
    """A ``destroy()`` method releasing every object held by *fields*."""
    held = [f"self.{oracle.var_name(f.name)}" for f in fields if contains_object_references(ci, [f.type])]
    return "\n".join(
        [
            "def destroy(self):",
            indent(block([f"_uniffi_destroy({', '.join(held)})"] if held else [], "pass"), 1),
        ]
    )
