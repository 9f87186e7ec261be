# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Errors in the Kotlin target: a ``sealed class`` deriving ``Exception``
whose companion object lifts it out of a failed call status."""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.kotlin.converters import MemberCodeType, annotated
from ffigen.bindings.kotlin.enum_ import destroy_variants, read_variants, sealed_companion, sealed_write, write_variants
from ffigen.bindings.kotlin.record import parameter_list
from ffigen.bindings.templating import indent
from ffigen.model.entities import ComponentInterface, ErrorDef, VariantDef
from ffigen.model.metadata import enum_contains_object_references, enum_contains_unsigned_types
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class ErrorCodeType(MemberCodeType):
    """``i32`` 1-based variant discriminant, then the fields of the variant."""

    def __init__(self, inner: ErrorDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.exception_name(oracle.class_name(self.inner.name))

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Error" + oracle.class_name(self.inner.name)


class KotlinError(MemberDeclaration):
    kind = "error"

    def __init__(self, inner: ErrorDef, ci: ComponentInterface) -> None:
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
        class_name = oracle.exception_name(oracle.class_name(self.inner.name))
        variants = self.inner.variants
        names = [oracle.exception_name(oracle.class_name(v.name)) for v in variants]
        declarations = [_variant_class(oracle, class_name, n, v) for n, v in zip(names, variants, strict=True)]

        header = f"sealed class {class_name} : Exception()"
        members = ["\n\n".join(declarations)] if declarations else []
        if self.contains_object_references:
            header += ", Disposable"
            members.append(destroy_variants(oracle, self._ci, class_name, names, variants))
        members.append(
            sealed_companion(
                f"companion object ErrorHandler : CallStatusErrorHandler<{class_name}>",
                class_name,
                read_variants(oracle, class_name, names, variants, new="()"),
                lift_modifier="override",
            )
        )
        members.append(sealed_write(write_variants(oracle, class_name, names, variants)))
        code = header + " {\n" + indent("\n\n".join(members), 1) + "\n}"
        return annotated(code, self.contains_unsigned_types)


# ################
# Implementation
# ################


def _variant_class(oracle: LanguageOracle, class_name: str, name: str, variant: VariantDef) -> str:
    if not variant.fields:
        return f"class {name} : {class_name}()"
    params = parameter_list(oracle, variant.fields, "val")
    parts = [f'"{f.name}=" + this.{oracle.var_name(f.name)}' for f in variant.fields]
    message = ' + ", " + '.join(parts)
    return "\n".join(
        [
            f"class {name}(",
            indent(params, 1),
            f") : {class_name}() {{",
            "    override val message",
            f"        get() = {message}",
            "}",
        ]
    )
