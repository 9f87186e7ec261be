# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Objects in the Kotlin target.

Every object gets an ``<Name>Interface`` declaring its methods and a class
deriving ``FFIObject``, which counts in-flight calls and frees the native
handle once the object is destroyed and the last call has returned.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberDeclaration
from ffigen.bindings.kotlin.converters import MemberCodeType, annotated
from ffigen.bindings.kotlin.function import (
    lowered_arguments,
    return_label,
    return_statement,
    native_call,
    signature,
    throws_annotation,
)
from ffigen.bindings.templating import indent, render
from ffigen.model.entities import ComponentInterface, ConstructorDef, MethodDef, ObjectDef
from ffigen.model.ffi import constructor_symbol, method_symbol, object_free_symbol
from ffigen.model.metadata import object_contains_unsigned_types
from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class ObjectCodeType(MemberCodeType):
    """A native handle; written to buffers as a ``u64``."""

    def __init__(self, inner: ObjectDef) -> None:
        self.inner = inner

    def type_label(self, oracle: LanguageOracle) -> str:
        return oracle.class_name(self.inner.name)

    def canonical_name(self, oracle: LanguageOracle) -> str:
        return "Object" + self.type_label(oracle)


class KotlinObject(MemberDeclaration):
    kind = "object"

    def __init__(self, inner: ObjectDef, ci: ComponentInterface) -> None:
        self.inner = inner
        self.namespace = ci.namespace
        self.contains_unsigned_types = object_contains_unsigned_types(ci, inner)

    @property
    def name(self) -> str:
        return self.inner.name

    def type_ref(self) -> TypeRef:
        return self.inner.type_ref

    def definition_code(self, oracle: LanguageOracle) -> str:
        obj = self.inner
        class_name = oracle.class_name(obj.name)
        interface = self._interface(oracle, class_name)

        members = []
        if obj.primary_constructor is not None:
            members.append(self._primary_constructor(oracle, obj.primary_constructor))
        members.append(render(_LIFECYCLE_TEMPLATE, free_symbol=object_free_symbol(self.namespace, obj)))
        members.extend(self._method(oracle, m) for m in obj.methods)
        members.append(self._companion(oracle, class_name))

        cls = "\n".join(
            [
                f"class {class_name}(",
                "    pointer: Pointer",
                f") : FFIObject(pointer), {class_name}Interface {{",
                indent("\n\n".join(members), 1),
                "}",
            ]
        )
        unsigned = self.contains_unsigned_types
        return annotated(interface, unsigned) + "\n\n" + annotated(cls, unsigned)

    def _interface(self, oracle: LanguageOracle, class_name: str) -> str:
        declarations = []
        for method in self.inner.methods:
            lines = throws_annotation(oracle, method.throws)
            lines.append(
                f"fun {oracle.fn_name(method.name)}({signature(oracle, method.arguments)})"
                f"{return_label(oracle, method.return_type)}"
            )
            declarations.append("\n".join(lines))
        if not declarations:
            return f"interface {class_name}Interface"
        return f"interface {class_name}Interface {{\n" + indent("\n\n".join(declarations), 1) + "\n}"

    def _constructor_call(self, oracle: LanguageOracle, ctor: ConstructorDef) -> str:
        return native_call(
            oracle,
            constructor_symbol(self.namespace, self.inner, ctor),
            lowered_arguments(oracle, ctor.arguments),
            ctor.throws,
        )

    def _primary_constructor(self, oracle: LanguageOracle, ctor: ConstructorDef) -> str:
        lines = throws_annotation(oracle, ctor.throws)
        lines.append(f"constructor({signature(oracle, ctor.arguments)}) : this(")
        lines.append(indent(self._constructor_call(oracle, ctor), 1))
        lines.append(")")
        return "\n".join(lines)

    def _method(self, oracle: LanguageOracle, method: MethodDef) -> str:
        call = native_call(
            oracle,
            method_symbol(self.namespace, self.inner, method),
            ["_scope.borrow(this)", *lowered_arguments(oracle, method.arguments)],
            method.throws,
        )
        lines = throws_annotation(oracle, method.throws)
        lines.append(
            f"override fun {oracle.fn_name(method.name)}({signature(oracle, method.arguments, defaults=False)})"
            f"{return_label(oracle, method.return_type)} {{"
        )
        lines.append(indent(return_statement(oracle, call, method.return_type), 1))
        lines.append("}")
        return "\n".join(lines)

    def _companion(self, oracle: LanguageOracle, class_name: str) -> str:
        members = [render(_CONVERSION_TEMPLATE, class_name=class_name)]
        for ctor in self.inner.alternate_constructors:
            lines = throws_annotation(oracle, ctor.throws)
            lines.append(f"fun {oracle.fn_name(ctor.name)}({signature(oracle, ctor.arguments)}): {class_name} {{")
            lines.append(f"    return {class_name}(")
            lines.append(indent(self._constructor_call(oracle, ctor), 2))
            lines.append("    )")
            lines.append("}")
            members.append("\n".join(lines))
        return "companion object {\n" + indent("\n\n".join(members), 1) + "\n}"


# ################
# Implementation
# ################

_LIFECYCLE_TEMPLATE = """\
override protected fun freeNativeHandle() {
    nativeCall() { _status ->
        _UniFFILib.INSTANCE.${free_symbol}(this.pointer, _status)
    }
}

internal fun lower(): Pointer {
    return CallScope.active.get()?.borrow(this) ?: this.callWithPointer { it }
}

internal fun write(buf: NativeBufferBuilder) {
    buf.putLong(Pointer.nativeValue(this.lower()))
}"""

_CONVERSION_TEMPLATE = """\
internal fun lift(ptr: Pointer): ${class_name} {
    return ${class_name}(ptr)
}

internal fun read(buf: ByteBuffer): ${class_name} {
    return ${class_name}.lift(Pointer(buf.getLong()))
}"""
