# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Top-level functions of the Kotlin target and the call helpers shared with
constructors and methods."""

from __future__ import annotations

from collections.abc import Sequence

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.kotlin.converters import annotated
from ffigen.bindings.kotlin.record import parameter_list
from ffigen.bindings.templating import indent
from ffigen.model.entities import ArgumentDef, ComponentInterface, FunctionDef
from ffigen.model.ffi import function_symbol
from ffigen.model.metadata import callable_contains_unsigned_types
from ffigen.model.types import ErrorTypeRef, TypeRef

# ###############
# Public Interface
# ###############


class KotlinFunction(MemberDeclaration):
    kind = "function"

    def __init__(self, inner: FunctionDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.namespace = ci.namespace
        self.contains_unsigned_types = callable_contains_unsigned_types(ci, inner)

    @property
    def name(self) -> str:
        return self.inner.name

    def definition_code(self, oracle: LanguageOracle) -> str:
        func = self.inner
        call = native_call(
            oracle,
            function_symbol(self.namespace, func),
            lowered_arguments(oracle, func.arguments),
            func.throws,
        )
        lines = throws_annotation(oracle, func.throws)
        params = signature(oracle, func.arguments)
        lines.append(f"fun {oracle.fn_name(func.name)}({params}){return_label(oracle, func.return_type)} {{")
        lines.append(indent(return_statement(oracle, call, func.return_type), 1))
        lines.append("}")
        return annotated("\n".join(lines), self.contains_unsigned_types)


def signature(oracle: LanguageOracle, arguments: Sequence[ArgumentDef], *, defaults: bool = True) -> str:
    if not arguments:
        return ""
    return "\n" + indent(parameter_list(oracle, arguments, defaults=defaults), 1) + "\n"


def lowered_arguments(oracle: LanguageOracle, arguments: Sequence[ArgumentDef]) -> list[str]:
    """Lowering expressions registered with the enclosing ``_scope``."""
    return [f"_scope.track({oracle.lower(oracle.var_name(a.name), a.type)})" for a in arguments]


def native_call(oracle: LanguageOracle, symbol: str, arguments: list[str], throws: str | None) -> str:
    """A ``nativeCall`` block invoking *symbol* with the call status appended,
    wrapped in the ``withCallScope`` that owns its lowered arguments.

    Calls that declare an error pass the error's companion object, which
    lifts it from the call status.
    """
    if throws is None:
        opener = "nativeCall() { _status ->"
    else:
        opener = f"nativeCallWithError({oracle.type_label(ErrorTypeRef(name=throws))}) {{ _status ->"
    args = ", ".join([*arguments, "_scope.called(_status)"])
    call = "\n".join([opener, f"    _UniFFILib.INSTANCE.{symbol}({args})", "}"])
    return "withCallScope { _scope ->\n" + indent(call, 1) + "\n}"


def return_statement(oracle: LanguageOracle, call: str, return_type: TypeRef | None) -> str:
    if return_type is None:
        return call
    return f"return {call}.let {{\n    {oracle.lift('it', return_type)}\n}}"


def return_label(oracle: LanguageOracle, return_type: TypeRef | None) -> str:
    if return_type is None:
        return ""
    return f": {oracle.type_label(return_type)}"


def throws_annotation(oracle: LanguageOracle, throws: str | None) -> list[str]:
    if throws is None:
        return []
    return [f"@Throws({oracle.type_label(ErrorTypeRef(name=throws))}::class)"]
