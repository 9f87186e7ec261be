# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Top-level functions of the Python target, plus the signature helpers every
callable (functions, constructors, methods, record initializers) shares."""

from __future__ import annotations

from collections.abc import Sequence

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.python.converters import converter_name
from ffigen.bindings.templating import indent
from ffigen.model.entities import ArgumentDef, FieldDef, FunctionDef
from ffigen.model.ffi import function_symbol
from ffigen.model.types import ErrorTypeRef, TypeRef

# ###############
# Public Interface
# ###############


class PythonFunction(MemberDeclaration):
    kind = "function"

    def __init__(self, inner: FunctionDef, namespace: str) -> None:
        self.inner = inner
        self.namespace = namespace

    @property
    def name(self) -> str:
        return self.inner.name

    def definition_code(self, oracle: LanguageOracle) -> str:
        func = self.inner
        call = native_call(
            oracle,
            f"_UniFFILib.{function_symbol(self.namespace, func)}",
            lowered_arguments(oracle, func.arguments),
            func.throws,
        )
        body = default_assignments(oracle, func.arguments)
        body.extend(call_scope(return_statement(oracle, call, func.return_type)))
        signature = ", ".join(parameter_list(oracle, func.arguments))
        return "\n".join(
            [
                f"def {oracle.fn_name(func.name)}({signature}){return_annotation(oracle, func.return_type)}:",
                indent("\n".join(body), 1),
            ]
        )


def parameter_list(oracle: LanguageOracle, params: Sequence[ArgumentDef | FieldDef]) -> list[str]:
    """Render annotated parameters.

    Parameters with a default take the ``_UNIFFI_DEFAULT`` sentinel; the real
    default is assigned in the body so that mutable defaults are never
    shared. A parameter without a default may follow one with a default, so
    everything from the first default on becomes keyword-only in that case.
    """
    parts: list[str] = []
    keyword_only = False
    for index, param in enumerate(params):
        has_default = param.default is not None
        if has_default and not keyword_only and any(p.default is None for p in params[index + 1 :]):
            parts.append("*")
            keyword_only = True
        text = f"{oracle.var_name(param.name)}: {oracle.type_label(param.type)}"
        if has_default:
            text += " = _UNIFFI_DEFAULT"
        parts.append(text)
    return parts


def default_assignments(oracle: LanguageOracle, params: Sequence[ArgumentDef | FieldDef]) -> list[str]:
    lines: list[str] = []
    for param in params:
        if param.default is None:
            continue
        nm = oracle.var_name(param.name)
        lines.append(f"if {nm} is _UNIFFI_DEFAULT:")
        lines.append(f"    {nm} = {oracle.literal(param.default, param.type)}")
    return lines


def lowered_arguments(oracle: LanguageOracle, arguments: Sequence[ArgumentDef]) -> list[str]:
    """Lowering expressions registered with the enclosing call scope."""
    return [f"_uniffi_scope.track({oracle.lower(oracle.var_name(a.name), a.type)})" for a in arguments]


def error_converter(oracle: LanguageOracle, throws: str | None) -> str:
    """The converter used to lift a declared error, or ``None``."""
    if throws is None:
        return "None"
    return converter_name(oracle, ErrorTypeRef(name=throws))


def native_call(oracle: LanguageOracle, symbol: str, arguments: list[str], throws: str | None) -> str:
    """A multi-line ``_uniffi_scope.call(...)`` expression.

    The expression only runs inside the block returned by :func:`call_scope`.
    """
    lines = [error_converter(oracle, throws) + ",", symbol + ","]
    lines.extend(a + "," for a in arguments)
    return "_uniffi_scope.call(\n" + indent("\n".join(lines), 1) + "\n)"


def call_scope(body: list[str]) -> list[str]:
    """Run *body* inside a ``_UniffiCallScope`` bound to ``_uniffi_scope``.

    The scope frees the lowered argument buffers if the native call never
    happens and keeps lowered objects borrowed until it has returned.
    """
    return ["with _UniffiCallScope() as _uniffi_scope:", indent("\n".join(body), 1)]


def return_statement(oracle: LanguageOracle, call: str, return_type: TypeRef | None) -> list[str]:
    if return_type is None:
        return call.splitlines()
    lift = oracle.find(return_type).lift(oracle, "\n" + indent(call, 1) + "\n")
    return ("return " + lift).splitlines()


def return_annotation(oracle: LanguageOracle, return_type: TypeRef | None) -> str:
    if return_type is None:
        return " -> None"
    return f" -> {oracle.type_label(return_type)}"
