# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Objects in the Python target.

An object is a native handle wrapped in a ``_FFIObject`` subclass. The
runtime base class counts in-flight calls and frees the handle exactly once,
when ``destroy()`` has been called (explicitly, by a ``with`` block or by the
garbage collector) and no call is still using it.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.python.converters import ConverterCodeType
from ffigen.bindings.python.function import (
    call_scope,
    default_assignments,
    lowered_arguments,
    native_call,
    parameter_list,
    return_annotation,
    return_statement,
)
from ffigen.bindings.templating import indent, render
from ffigen.model.entities import ComponentInterface, ConstructorDef, MethodDef, ObjectDef
from ffigen.model.ffi import constructor_symbol, method_symbol, object_free_symbol
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class ObjectCodeType(ConverterCodeType):
    """A native handle; written to buffers as a ``u64``."""

    def __init__(self, inner: ObjectDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Object" + self.type_label(oracle)

    def helper_code(self, oracle: LanguageOracle) -> str:
        return render(_CONVERTER_TEMPLATE, converter=self.converter(oracle), cls=self.type_label(oracle))


class PythonObject(MemberDeclaration):
    kind = "object"

    def __init__(self, inner: ObjectDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.namespace = ci.namespace

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        obj = self.inner
        class_name = oracle.class_name(obj.name)
        members = [f'_uniffi_free_symbol = "{object_free_symbol(self.namespace, obj)}"']
        members.append(self._primary_constructor(oracle, class_name))
        members.extend(self._alternate_constructor(oracle, class_name, c) for c in obj.alternate_constructors)
        members.extend(self._method(oracle, m) for m in obj.methods)
        return f"class {class_name}(_FFIObject):\n" + indent("\n\n".join(members), 1)

    def _primary_constructor(self, oracle: LanguageOracle, class_name: str) -> str:
        ctor = self.inner.primary_constructor
        if ctor is None:
            return "\n".join(
                [
                    "def __init__(self, *args, **kwargs):",
                    f'    raise TypeError("{class_name} has no primary constructor, use an alternate constructor")',
                ]
            )
        call = self._constructor_call(oracle, ctor)
        body = default_assignments(oracle, ctor.arguments)
        body.extend(call_scope(["super().__init__(", indent(call, 1), ")"]))
        signature = ", ".join(["self"] + parameter_list(oracle, ctor.arguments))
        return f"def __init__({signature}):\n" + indent("\n".join(body), 1)

    def _alternate_constructor(self, oracle: LanguageOracle, class_name: str, ctor: ConstructorDef) -> str:
        call = self._constructor_call(oracle, ctor)
        body = default_assignments(oracle, ctor.arguments)
        body.extend(call_scope(["return cls._uniffi_make_instance(", indent(call, 1), ")"]))
        signature = ", ".join(["cls"] + parameter_list(oracle, ctor.arguments))
        return "\n".join(
            [
                "@classmethod",
                f"def {oracle.fn_name(ctor.name)}({signature}) -> {class_name}:",
                indent("\n".join(body), 1),
            ]
        )

    def _constructor_call(self, oracle: LanguageOracle, ctor: ConstructorDef) -> str:
        return native_call(
            oracle,
            f"_UniFFILib.{constructor_symbol(self.namespace, self.inner, ctor)}",
            lowered_arguments(oracle, ctor.arguments),
            ctor.throws,
        )

    def _method(self, oracle: LanguageOracle, method: MethodDef) -> str:
        call = native_call(
            oracle,
            f"_UniFFILib.{method_symbol(self.namespace, self.inner, method)}",
            ["_uniffi_scope.borrow(self)"] + lowered_arguments(oracle, method.arguments),
            method.throws,
        )
        body = default_assignments(oracle, method.arguments)
        body.extend(call_scope(return_statement(oracle, call, method.return_type)))
        signature = ", ".join(["self"] + parameter_list(oracle, method.arguments))
        return "\n".join(
            [
                f"def {oracle.fn_name(method.name)}({signature}){return_annotation(oracle, method.return_type)}:",
                indent("\n".join(body), 1),
            ]
        )


# ################
# Implementation
# ################

_CONVERTER_TEMPLATE = """\
class ${converter}:
    @staticmethod
    def lift(value):
        return ${cls}._uniffi_make_instance(value)

    @staticmethod
    def lower(value):
        if not isinstance(value, ${cls}):
            raise TypeError(f"expected ${cls}, got {type(value).__name__}")
        return _uniffi_lower_object(value)

    @staticmethod
    def read(stream):
        return ${converter}.lift(stream.unpack(">Q"))

    @staticmethod
    def write(value, builder):
        builder.pack(">Q", ${converter}.lower(value))"""
