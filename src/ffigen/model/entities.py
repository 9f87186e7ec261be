# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Nominal entities and the top-level component interface."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict

from ffigen.model.literals import LiteralValue
from ffigen.model.types import (
    CallbackInterfaceTypeRef,
    EnumTypeRef,
    ErrorTypeRef,
    ObjectTypeRef,
    RecordTypeRef,
    TypeRef,
    canonical_name,
    walk_type,
)

# ###############
# Public Interface
# ###############


class FieldDef(BaseModel):
    """A named, typed member of a record or of an enum/error variant."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    default: LiteralValue | None = None


class ArgumentDef(BaseModel):
    """A named, typed parameter of a function, method or constructor."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    default: LiteralValue | None = None


class VariantDef(BaseModel):
    """A variant of an enum or error, optionally carrying fields."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldDef, ...] = ()

    @property
    def has_fields(self) -> bool:
        return len(self.fields) > 0


class EnumDef(BaseModel):
    """An enumeration. It is *flat* when none of its variants carry data."""

    model_config = ConfigDict(frozen=True)

    name: str
    variants: tuple[VariantDef, ...] = ()

    @property
    def is_flat(self) -> bool:
        return not any(v.has_fields for v in self.variants)

    @property
    def type_ref(self) -> EnumTypeRef:
        return EnumTypeRef(name=self.name)


class RecordDef(BaseModel):
    """A by-value composite of named fields."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldDef, ...] = ()

    @property
    def type_ref(self) -> RecordTypeRef:
        return RecordTypeRef(name=self.name)


class ErrorDef(BaseModel):
    """An error type: a set of variants, each of which may carry fields."""

    model_config = ConfigDict(frozen=True)

    name: str
    variants: tuple[VariantDef, ...] = ()

    @property
    def type_ref(self) -> ErrorTypeRef:
        return ErrorTypeRef(name=self.name)


class FunctionDef(BaseModel):
    """A top-level function exported by the component."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: tuple[ArgumentDef, ...] = ()
    return_type: TypeRef | None = None
    throws: str | None = None


class ConstructorDef(BaseModel):
    """A constructor of an object. The constructor named ``new`` is the primary one."""

    model_config = ConfigDict(frozen=True)

    name: str = "new"
    arguments: tuple[ArgumentDef, ...] = ()
    throws: str | None = None

    @property
    def is_primary(self) -> bool:
        return self.name == "new"


class MethodDef(BaseModel):
    """A method of an object or of a callback interface."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: tuple[ArgumentDef, ...] = ()
    return_type: TypeRef | None = None
    throws: str | None = None


class ObjectDef(BaseModel):
    """An object living on the native side, passed across the boundary by handle."""

    model_config = ConfigDict(frozen=True)

    name: str
    constructors: tuple[ConstructorDef, ...] = ()
    methods: tuple[MethodDef, ...] = ()

    @property
    def primary_constructor(self) -> ConstructorDef | None:
        return next((c for c in self.constructors if c.is_primary), None)

    @property
    def alternate_constructors(self) -> list[ConstructorDef]:
        return [c for c in self.constructors if not c.is_primary]

    @property
    def type_ref(self) -> ObjectTypeRef:
        return ObjectTypeRef(name=self.name)


class CallbackInterfaceDef(BaseModel):
    """An interface implemented on the foreign side and invoked from native code."""

    model_config = ConfigDict(frozen=True)

    name: str
    methods: tuple[MethodDef, ...] = ()

    @property
    def type_ref(self) -> CallbackInterfaceTypeRef:
        return CallbackInterfaceTypeRef(name=self.name)


Definition = EnumDef | RecordDef | ErrorDef | ObjectDef | CallbackInterfaceDef


class ComponentInterface(BaseModel):
    """The complete, immutable description of a component's public API."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    functions: tuple[FunctionDef, ...] = ()
    enums: tuple[EnumDef, ...] = ()
    records: tuple[RecordDef, ...] = ()
    errors: tuple[ErrorDef, ...] = ()
    objects: tuple[ObjectDef, ...] = ()
    callback_interfaces: tuple[CallbackInterfaceDef, ...] = ()

    def get_definition(self, name: str) -> Definition | None:
        """Look up any nominal definition by its logical name."""
        for group in (self.enums, self.records, self.errors, self.objects, self.callback_interfaces):
            for definition in group:
                if definition.name == name:
                    return definition
        return None

    def get_enum_definition(self, name: str) -> EnumDef | None:
        return next((e for e in self.enums if e.name == name), None)

    def get_record_definition(self, name: str) -> RecordDef | None:
        return next((r for r in self.records if r.name == name), None)

    def get_error_definition(self, name: str) -> ErrorDef | None:
        return next((e for e in self.errors if e.name == name), None)

    def get_object_definition(self, name: str) -> ObjectDef | None:
        return next((o for o in self.objects if o.name == name), None)

    def get_callback_interface_definition(self, name: str) -> CallbackInterfaceDef | None:
        return next((c for c in self.callback_interfaces if c.name == name), None)

    def iter_callables(self) -> Iterator[FunctionDef | ConstructorDef | MethodDef]:
        """Yield every function, constructor and method in declaration order."""
        yield from self.functions
        for obj in self.objects:
            yield from obj.constructors
            yield from obj.methods
        for cbi in self.callback_interfaces:
            yield from cbi.methods

    def iter_types(self) -> list[TypeRef]:
        """Return every type used anywhere in the interface, ordered by canonical name.

        Nominal definitions contribute their own type, and nested compound
        types contribute each of their inner types.
        """
        seen: dict[str, TypeRef] = {}

        def _add(type_ref: TypeRef) -> None:
            for t in walk_type(type_ref):
                seen.setdefault(canonical_name(t), t)

        for enum_def in self.enums:
            _add(enum_def.type_ref)
            for variant in enum_def.variants:
                for f in variant.fields:
                    _add(f.type)
        for record in self.records:
            _add(record.type_ref)
            for f in record.fields:
                _add(f.type)
        for error in self.errors:
            _add(error.type_ref)
            for variant in error.variants:
                for f in variant.fields:
                    _add(f.type)
        for obj in self.objects:
            _add(obj.type_ref)
        for cbi in self.callback_interfaces:
            _add(cbi.type_ref)
        for func in self.iter_callables():
            for arg in func.arguments:
                _add(arg.type)
            return_type = getattr(func, "return_type", None)
            if return_type is not None:
                _add(return_type)
        return [seen[key] for key in sorted(seen)]
