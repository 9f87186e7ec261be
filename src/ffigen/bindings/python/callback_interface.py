# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Callback interfaces in the Python target.

The user implements a ``typing.Protocol``. Lowering an implementation stores
it in a handle map and passes the ``u64`` handle to native code, which later
calls back through a single ctypes entry point with the handle, a 1-based
method index and the serialized arguments.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.python.converters import ConverterCodeType, converter_name
from ffigen.bindings.python.function import return_annotation
from ffigen.bindings.templating import indent
from ffigen.model.entities import CallbackInterfaceDef, ComponentInterface, MethodDef
from ffigen.model.ffi import callback_init_symbol
from ffigen.model.types import ErrorTypeRef, TypeRef

# ###############
# Public Interface
# ###############


class CallbackInterfaceCodeType(ConverterCodeType):
    """A handle-map key, written to buffers as a ``u64``.

    The converter is an instance of a generated ``_UniffiCallbackInterface``
    subclass rather than a class, since it owns the handle map.
    """

    def __init__(self, inner: CallbackInterfaceDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "CallbackInterface" + self.type_label(oracle)

    def helper_code(self, oracle: LanguageOracle) -> str:
        impl = "_UniffiCallbackInterface" + self.type_label(oracle)
        methods = self.inner.methods
        init = [
            f'super().__init__("{callback_init_symbol(oracle.ci.namespace, self.inner)}")',
            "self._methods = (" + "".join(f"self._call_{oracle.fn_name(m.name)}, " for m in methods).rstrip(" ") + ")",
        ]
        body = ["def __init__(self):", indent("\n".join(init), 1)]
        for method in methods:
            body.append("")
            body.append(_dispatch_method(oracle, method))
        converter = self.converter(oracle)
        return "\n".join(
            [
                f"class {impl}(_UniffiCallbackInterface):",
                indent("\n".join(body), 1),
                "",
                "",
                f"{converter} = {impl}()",
                f'_UNIFFI_CALLBACK_INTERFACES["{self.canonical_name(oracle)}"] = {converter}',
            ]
        )


class PythonCallbackInterface(MemberDeclaration):
    kind = "callback_interface"

    def __init__(self, inner: CallbackInterfaceDef, ci: ComponentInterface) -> None:
        self.inner = inner

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        stubs = []
        for method in self.inner.methods:
            params = ", ".join(
                ["self"] + [f"{oracle.var_name(a.name)}: {oracle.type_label(a.type)}" for a in method.arguments]
            )
            annotation = return_annotation(oracle, method.return_type)
            stubs.append(f"def {oracle.fn_name(method.name)}({params}){annotation}: ...")
        body = "\n\n".join(stubs) if stubs else "pass"
        return f"class {oracle.class_name(self.inner.name)}(typing.Protocol):\n" + indent(body, 1)

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return ["import typing"]


# ################
# Implementation
# ################


def _dispatch_method(oracle: LanguageOracle, method: MethodDef) -> str:
    """The ``_call_<method>(handle, args)`` trampoline returning ``(code, buffer or None)``."""
    readers = [oracle.read("stream", a.type) + "," for a in method.arguments]
    if readers:
        read_args = ["def read_args(stream):", "    return (", indent("\n".join(readers), 2), "    )"]
    else:
        read_args = ["def read_args(stream):", "    return ()"]
    call = f"obj.{oracle.fn_name(method.name)}(*values)"
    invoke = f"result = {call}" if method.return_type is not None else call
    lines = read_args + [
        "values = _uniffi_lift_buffer(args, read_args)",
        "obj = self.lift(handle)",
    ]
    if method.throws is None:
        lines.append(invoke)
    else:
        error = ErrorTypeRef(name=method.throws)
        lines.extend(
            [
                "try:",
                f"    {invoke}",
                f"except {oracle.type_label(error)} as exc:",
                f"    return (self.ERROR, {oracle.lower('exc', error)})",
            ]
        )
    if method.return_type is None:
        lines.append("return (self.SUCCESS, None)")
    else:
        writer = converter_name(oracle, method.return_type) + ".write"
        lines.append(f"return (self.SUCCESS, _uniffi_lower_buffer(result, {writer}))")
    return f"def _call_{oracle.fn_name(method.name)}(self, handle, args):\n" + indent("\n".join(lines), 1)
