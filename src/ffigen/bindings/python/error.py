# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Errors in the Python target: an ``Exception`` subclass per error type, with
one subclass per variant (``ArithError.IntegerOverflow``)."""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.python.converters import ConverterCodeType
from ffigen.bindings.python.enum_ import variant_class_name, variant_classes, variant_converter
from ffigen.bindings.python.record import construct_from_stream, write_fields
from ffigen.model.entities import ComponentInterface, ErrorDef
from ffigen.model.metadata import enum_contains_object_references
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class ErrorCodeType(ConverterCodeType):
    """``i32`` 1-based variant discriminant, then the fields of the variant."""

    def __init__(self, inner: ErrorDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.exception_name(oracle.class_name(self.inner.name))

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Error" + oracle.class_name(self.inner.name)

    def helper_code(self, oracle: LanguageOracle) -> str:
        class_name = self.type_label(oracle)
        variants = self.inner.variants
        classes = [variant_class_name(class_name, v) for v in variants]
        return variant_converter(
            self.converter(oracle),
            class_name,
            [construct_from_stream(oracle, c, v.fields) for c, v in zip(classes, variants, strict=True)],
            [f"isinstance(value, {c})" for c in classes],
            [write_fields(oracle, v.fields, "value") for v in variants],
        )


class PythonError(MemberDeclaration):
    kind = "error"

    def __init__(self, inner: ErrorDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.contains_object_references = enum_contains_object_references(ci, inner)
        self._ci = ci

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        return variant_classes(
            oracle,
            self._ci,
            self.inner,
            oracle.exception_name(oracle.class_name(self.inner.name)),
            base="Exception",
            attribute=lambda nm: oracle.exception_name(oracle.class_name(nm)),
            init_tail=["super().__init__(repr(self))"],
        )
