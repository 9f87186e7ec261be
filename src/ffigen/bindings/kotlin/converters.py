# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared bases for Kotlin code types.

Kotlin code types come in three flavours, depending on where the wire
operations of a type live in the generated file:

* scalars, strings and callback interfaces have an ``internal object``
  named ``<CanonicalName>Internals``;
* compounds, timestamps and durations have four top-level functions named
  ``lower<CanonicalName>``, ``write<CanonicalName>``, ``lift<CanonicalName>``
  and ``read<CanonicalName>``;
* records, enums, errors and objects carry ``lower()``/``write()`` methods
  and ``lift()``/``read()`` on their companion object.
"""

from __future__ import annotations

from ffigen.bindings.backend import CodeType, LanguageOracle

# ###############
# Public Interface
# ###############

#: Placed before declarations that mention unsigned Kotlin types.
EXPERIMENTAL_UNSIGNED = "@ExperimentalUnsignedTypes"


def annotated(code: str, unsigned: bool) -> str:
    """Prefix *code* with the unsigned-types opt-in when *unsigned* is set."""
    return f"{EXPERIMENTAL_UNSIGNED}\n{code}" if unsigned else code


class InternalsCodeType(CodeType):
    def internals(self, oracle: LanguageOracle) -> str:
        return self.canonical_name(oracle) + "Internals"

    def lower(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.internals(oracle)}.lower({nm})"

    def write(self, oracle: LanguageOracle, nm: str, target: str) -> str:
        return f"{self.internals(oracle)}.write({nm}, {target})"

    def lift(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.internals(oracle)}.lift({nm})"

    def read(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.internals(oracle)}.read({nm})"


class HelperFunctionCodeType(CodeType):
    def lower(self, oracle: LanguageOracle, nm: str) -> str:
        return f"lower{self.canonical_name(oracle)}({nm})"

    def write(self, oracle: LanguageOracle, nm: str, target: str) -> str:
        return f"write{self.canonical_name(oracle)}({nm}, {target})"

    def lift(self, oracle: LanguageOracle, nm: str) -> str:
        return f"lift{self.canonical_name(oracle)}({nm})"

    def read(self, oracle: LanguageOracle, nm: str) -> str:
        return f"read{self.canonical_name(oracle)}({nm})"


class MemberCodeType(CodeType):
    def lower(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{nm}.lower()"

    def write(self, oracle: LanguageOracle, nm: str, target: str) -> str:
        return f"{nm}.write({target})"

    def lift(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.type_label(oracle)}.lift({nm})"

    def read(self, oracle: LanguageOracle, nm: str) -> str:
        return f"{self.type_label(oracle)}.read({nm})"
