# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared base for Python code types.

Every type in the generated Python module is handled by a converter class
named ``_UniffiConverter<CanonicalName>`` exposing ``lift``, ``lower``,
``read`` and ``write``. The code types therefore only differ in the
converter they emit as helper code and in how they spell the type.
"""

from __future__ import annotations

from ffigen.bindings.backend import CodeType, LanguageOracle
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############

CONVERTER_PREFIX = "_UniffiConverter"


def converter_name(oracle: LanguageOracle, type_ref: TypeRef) -> str:
    """Name of the generated converter class for *type_ref*."""
    return CONVERTER_PREFIX + oracle.find(type_ref).canonical_name(oracle)


class ConverterCodeType(CodeType):
    """A code type whose wire operations call its generated converter class."""

    def converter(self, oracle: LanguageOracle) -> str:
        return CONVERTER_PREFIX + self.canonical_name(oracle)

    def lower(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.converter(oracle)}.lower({nm})"

    def write(self, oracle: LanguageOracle, nm: str, target: str) -> str:
        return f"{self.converter(oracle)}.write({nm}, {target})"

    def lift(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.converter(oracle)}.lift({nm})"

    def read(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.converter(oracle)}.read({nm})"
