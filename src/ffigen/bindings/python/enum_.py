# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Enums in the Python target.

A flat enum (no variant carries data) becomes an ``enum.Enum`` whose values
are the 1-based discriminants. An enum with data becomes a base class plus
one subclass per variant, reachable as ``Base.VARIANT``. Errors reuse the
variant-class machinery with an ``Exception`` base.
"""

from __future__ import annotations

from ffigen.bindings.backend import GenerationError, LanguageOracle, MemberDeclaration
from ffigen.bindings.python.converters import ConverterCodeType
from ffigen.bindings.python.record import construct_from_stream, destroy_method, value_class_body, write_fields
from ffigen.bindings.templating import indent
from ffigen.model.entities import ComponentInterface, EnumDef, ErrorDef, VariantDef
from ffigen.model.literals import EnumLiteral, LiteralValue
from ffigen.model.metadata import contains_object_references, enum_contains_object_references
from ffigen.model.types import TypeRef
from ffigen.naming import upper_camel

# ###############
# Public Interface
# ###############


class EnumCodeType(ConverterCodeType):
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
        text = f"{self.type_label(oracle)}.{oracle.enum_variant_name(variant.name)}"
        return text if self.inner.is_flat else text + "()"

    def helper_code(self, oracle: LanguageOracle) -> str:
        class_name = self.type_label(oracle)
        if self.inner.is_flat:
            members = [f"{class_name}.{oracle.enum_variant_name(v.name)}" for v in self.inner.variants]
            return variant_converter(
                self.converter(oracle),
                class_name,
                [f"return {m}" for m in members],
                [f"value is {m}" for m in members],
                ["" for _ in members],
            )
        classes = [variant_class_name(class_name, v) for v in self.inner.variants]
        return variant_converter(
            self.converter(oracle),
            class_name,
            [construct_from_stream(oracle, c, v.fields) for c, v in zip(classes, self.inner.variants, strict=True)],
            [f"isinstance(value, {c})" for c in classes],
            [write_fields(oracle, v.fields, "value") for v in self.inner.variants],
        )


class PythonEnum(MemberDeclaration):
    kind = "enum"

    def __init__(self, inner: EnumDef, ci: ComponentInterface) -> None:
        self.inner = inner
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
            members = [f"{oracle.enum_variant_name(v.name)} = {i}" for i, v in enumerate(self.inner.variants, 1)]
            body = "\n".join(members) if members else "pass"
            return f"class {class_name}(enum.Enum):\n{indent(body, 1)}"
        return variant_classes(oracle, self._ci, self.inner, class_name, base="")

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return ["import enum"] if self.inner.is_flat else []


def variant_class_name(class_name: str, variant: VariantDef) -> str:
    """The private class implementing *variant*, e.g. ``_Shape_Circle``."""
    return f"_{class_name}_{upper_camel(variant.name)}"


def variant_classes(
    oracle: LanguageOracle,
    ci: ComponentInterface,
    definition: EnumDef | ErrorDef,
    class_name: str,
    *,
    base: str,
    attribute=None,
    init_tail: list[str] | None = None,
) -> str:
    """Render a base class, one subclass per variant and the ``Base.VARIANT`` aliases.

    Args:
        oracle: The Python oracle.
        ci: The component, used for object-reference metadata.
        definition: The enum or error whose variants are rendered.
        class_name: The name of the base class.
        base: The superclass of the base class, or an empty string.
        attribute: Maps a variant name to its attribute on the base class;
            defaults to the oracle's enum variant name.
        init_tail: Extra statements appended to every variant ``__init__``.
    """
    attribute = attribute or oracle.enum_variant_name
    owns_objects = enum_contains_object_references(ci, definition)
    header = f"class {class_name}({base}):" if base else f"class {class_name}:"
    base_body = ["def destroy(self):", "    pass"] if owns_objects else ["pass"]
    parts = [header + "\n" + indent("\n".join(base_body), 1)]
    aliases = []
    for variant in definition.variants:
        variant_class = variant_class_name(class_name, variant)
        label = f"{class_name}.{attribute(variant.name)}"
        lines = [f"class {variant_class}({class_name}):"]
        body = value_class_body(oracle, variant_class, variant.fields, label=label, init_tail=init_tail)
        lines.append(indent(body, 1))
        if owns_objects and contains_object_references(ci, [f.type for f in variant.fields]):
            lines.append("")
            lines.append(indent(destroy_method(oracle, ci, variant.fields), 1))
        parts.append("\n".join(lines))
        aliases.append(f"{label} = {variant_class}")
    if aliases:
        parts.append("\n".join(aliases))
    return "\n\n\n".join(parts)


def variant_converter(
    converter: str,
    class_name: str,
    readers: list[str],
    conditions: list[str],
    writers: list[str],
) -> str:
    """A converter dispatching on the 1-based discriminant of each variant.

    Args:
        converter: Name of the converter class.
        class_name: Name used in error messages.
        readers: Per variant, the statements run once its discriminant was read.
        conditions: Per variant, the expression selecting it when writing.
        writers: Per variant, the statements writing its fields (may be empty).
    """
    read_lines = ["variant = stream.unpack(\">i\")"]
    write_lines: list[str] = []
    for index, (reader, condition, writer) in enumerate(zip(readers, conditions, writers, strict=True), 1):
        read_lines.append(f"if variant == {index}:")
        read_lines.append(indent(reader, 1))
        write_lines.append(f"if {condition}:")
        write_lines.append(f"    builder.pack(\">i\", {index})")
        if writer and writer != "pass":
            write_lines.append(indent(writer, 1))
        write_lines.append("    return")
    read_lines.append(f'raise InternalError(f"Invalid {class_name} discriminant: {{variant}}")')
    write_lines.append(f'raise ValueError(f"Unexpected {class_name} value: {{value!r}}")')
    return "\n".join(
        [
            f"class {converter}(_UniffiConverterBuffer):",
            "    @staticmethod",
            "    def read(stream):",
            indent("\n".join(read_lines), 2),
            "",
            "    @staticmethod",
            "    def write(value, builder):",
            indent("\n".join(write_lines), 2),
        ]
    )
