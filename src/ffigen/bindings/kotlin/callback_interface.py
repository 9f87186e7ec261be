# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Callback interfaces in the Kotlin target.

User implementations of the interface are kept in a handle map; native code
holds the ``u64`` handle and calls back through one JNA ``ForeignCallback``
per interface, passing the method index and the serialized arguments.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.kotlin.converters import InternalsCodeType, annotated
from ffigen.bindings.kotlin.function import return_label, signature, throws_annotation
from ffigen.bindings.templating import indent, render
from ffigen.model.entities import CallbackInterfaceDef, ComponentInterface, MethodDef
from ffigen.model.ffi import callback_init_symbol
from ffigen.model.metadata import callback_interface_contains_unsigned_types
from ffigen.model.types import ErrorTypeRef, TypeRef

# ###############
# Public Interface
# ###############


class CallbackInterfaceCodeType(InternalsCodeType):
    """A handle into the foreign handle map, passed as ``u64``."""

    def __init__(self, inner: CallbackInterfaceDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "CallbackInterface" + self.type_label(oracle)

    def helper_code(self, oracle: LanguageOracle) -> str:
        label = self.type_label(oracle)
        methods = self.inner.methods
        internals = self.internals(oracle)
        branches = [
            f"{index} -> {{\n    val cb = {internals}.lift(handle)\n"
            f"    this.{_invoke_name(oracle, m)}(cb, args, outBuf)\n}}"
            for index, m in enumerate(methods, 1)
        ]
        code = render(
            _FOREIGN_CALLBACK_TEMPLATE,
            label=label,
            internals=internals,
            branches=indent("\n".join(branches), 4),
            invokers=indent("\n\n".join(_invoker(oracle, label, m) for m in methods), 1),
            init_symbol=callback_init_symbol(oracle.ci.namespace, self.inner),
        )
        return annotated(code, callback_interface_contains_unsigned_types(oracle.ci, self.inner))


class KotlinCallbackInterface(MemberDeclaration):
    kind = "callback_interface"

    def __init__(self, inner: CallbackInterfaceDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.contains_unsigned_types = callback_interface_contains_unsigned_types(ci, inner)

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        class_name = oracle.class_name(self.inner.name)
        declarations = []
        for method in self.inner.methods:
            lines = throws_annotation(oracle, method.throws)
            lines.append(
                f"fun {oracle.fn_name(method.name)}({signature(oracle, method.arguments)})"
                f"{return_label(oracle, method.return_type)}"
            )
            declarations.append("\n".join(lines))
        body = " {\n" + indent("\n\n".join(declarations), 1) + "\n}" if declarations else ""
        return annotated(f"interface {class_name}{body}", self.contains_unsigned_types)


# ################
# Implementation
# ################


def _invoke_name(oracle: LanguageOracle, method: MethodDef) -> str:
    name = oracle.fn_name(method.name).strip("`")
    return "invoke" + name[:1].upper() + name[1:]


def _invoker(oracle: LanguageOracle, label: str, method: MethodDef) -> str:
    """A private method reading the arguments of *method*, calling it and
    writing the outcome to ``outBuf``."""
    reads = [f"val {oracle.var_name(a.name)} = {oracle.read('buf', a.type)}" for a in method.arguments]
    names = ", ".join(oracle.var_name(a.name) for a in method.arguments)
    call = f"kotlinCallbackInterface.{oracle.fn_name(method.name)}({names})"
    lines = [
        f"private fun {_invoke_name(oracle, method)}(\n"
        f"    kotlinCallbackInterface: {label},\n"
        "    args: NativeBuffer.ByValue,\n"
        "    outBuf: NativeBuffer.ByReference,\n"
        "): Int {",
        "    val invocation = liftFromNativeBuffer(args) { buf ->",
    ]
    lines.extend("        " + r for r in reads)
    lines.append(f"        fun() = {call}")
    lines.append("    }")

    if method.return_type is None:
        success = ["invocation()", "CALLBACK_SUCCESS"]
    else:
        write = oracle.write("v", "out", method.return_type)
        success = [
            "val result = invocation()",
            f"outBuf.setValue(lowerIntoNativeBuffer(result) {{ v, out -> {write} }})",
            "CALLBACK_SUCCESS",
        ]
    if method.throws is None:
        lines.extend("    " + s for s in success[:-1])
        lines.append("    return " + success[-1])
    else:
        error_label = oracle.type_label(ErrorTypeRef(name=method.throws))
        lines.append("    return try {")
        lines.extend("        " + s for s in success)
        lines.append(f"    }} catch (e: {error_label}) {{")
        lines.append("        outBuf.setValue(e.lower())")
        lines.append("        CALLBACK_ERROR")
        lines.append("    }")
    lines.append("}")
    return "\n".join(lines)


_FOREIGN_CALLBACK_TEMPLATE = """\
internal class ForeignCallback${label} : ForeignCallback {
    @Suppress("TooGenericExceptionCaught")
    override fun invoke(handle: Long, method: Int, args: NativeBuffer.ByValue, outBuf: NativeBuffer.ByReference): Int {
        return try {
            when (method) {
                IDX_CALLBACK_FREE -> {
                    ${internals}.drop(handle)
                    CALLBACK_SUCCESS
                }
${branches}
                else -> {
                    NativeBuffer.free(args)
                    outBuf.setValue(lowerNativeString("Invalid callback method index " + method))
                    CALLBACK_UNEXPECTED_ERROR
                }
            }
        } catch (e: Throwable) {
            outBuf.setValue(lowerNativeString(e.toString()))
            CALLBACK_UNEXPECTED_ERROR
        }
    }

${invokers}
}

internal object ${internals} : FfiConverterCallbackInterface<${label}>(ForeignCallback${label}()) {
    override fun register(lib: _UniFFILib) {
        lib.${init_symbol}(this.foreignCallback)
    }
}"""
