# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Language-independent abstractions shared by every binding generator.

A target language is described by three collaborating pieces:

* a :class:`LanguageOracle`, which knows the target's naming conventions and
  resolves each logical type to a :class:`CodeType`;
* :class:`CodeType` handlers, which render the expressions that move a value
  of one logical type across the native boundary (``lower``/``write`` towards
  native code, ``lift``/``read`` back) plus any helper code the type needs
  once per generated file;
* :class:`MemberDeclaration` objects, one per nominal definition or function,
  which render the public API the user sees.

:class:`MemberAggregator` glues them together into one deterministic file.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ffigen.config import TargetConfig
from ffigen.model.entities import ArgumentDef, ComponentInterface, Definition
from ffigen.model.ffi import FFIType
from ffigen.model.literals import LiteralValue
from ffigen.model.types import (
    CallbackInterfaceTypeRef,
    EnumTypeRef,
    ErrorTypeRef,
    ObjectTypeRef,
    RecordTypeRef,
    TypeRef,
    canonical_name,
    is_nominal,
)

# ###############
# Public Interface
# ###############


class GenerationError(Exception):
    """Raised when bindings cannot be generated for a component.

    Attributes:
        message: Human-readable description of the problem.
        entity: Name of the definition or type the problem concerns, if any.
    """

    def __init__(self, message: str, *, entity: str | None = None) -> None:
        super().__init__(message if entity is None else f"{entity}: {message}")
        self.message = message
        self.entity = entity


class CodeType(ABC):
    """Handler for one logical type in one target language."""

    @abstractmethod
    def type_label(self, oracle: LanguageOracle) -> str:
        """The target-language spelling of the type."""

    @abstractmethod
    def canonical_name(self, oracle: LanguageOracle) -> str:
        """A name unique to this type, used to name its helpers."""

    def literal(self, oracle: LanguageOracle, literal: LiteralValue) -> str:
        """Render *literal* as a target-language expression of this type."""
        raise GenerationError(
            f"Type has no literal syntax, cannot render a '{literal.kind}' literal",
            entity=self.canonical_name(oracle),
        )

    @abstractmethod
    def lower(self, oracle: LanguageOracle, nm: str) -> str:
        """Expression converting the value *nm* into its FFI representation."""

    @abstractmethod
    def write(self, oracle: LanguageOracle, nm: str, target: str) -> str:
        """Expression serializing the value *nm* into the buffer builder *target*."""

    @abstractmethod
    def lift(self, oracle: LanguageOracle, nm: str) -> str:
        """Expression converting the FFI value *nm* back into a foreign value."""

    @abstractmethod
    def read(self, oracle: LanguageOracle, nm: str) -> str:
        """Expression deserializing a value from the byte stream *nm*."""

    def helper_code(self, oracle: LanguageOracle) -> str | None:
        """Code emitted once per generated file for this type, if any."""
        return None

    def imports(self, oracle: LanguageOracle) -> list[str]:
        """Import statements the type's helper code or label depend on."""
        return []


class LanguageOracle(ABC):
    """Naming rules of a target language and the registry of its code types."""

    def __init__(self, ci: ComponentInterface) -> None:
        self.ci = ci

    def find(self, type_ref: TypeRef) -> CodeType:
        """Return the code type handling *type_ref*.

        Nominal types are bound to the definition they name.

        Raises:
            GenerationError: If a nominal type names no definition of its kind.
        """
        definition = self.resolve(type_ref) if is_nominal(type_ref) else None
        return self.create_code_type(type_ref, definition)

    def resolve(self, type_ref: TypeRef) -> Definition:
        """Look up the definition a nominal type refers to."""
        lookup = {
            EnumTypeRef: self.ci.get_enum_definition,
            RecordTypeRef: self.ci.get_record_definition,
            ErrorTypeRef: self.ci.get_error_definition,
            ObjectTypeRef: self.ci.get_object_definition,
            CallbackInterfaceTypeRef: self.ci.get_callback_interface_definition,
        }[type(type_ref)]
        definition = lookup(type_ref.name)
        if definition is None:
            raise GenerationError(f"Unknown {type_ref.kind} type '{type_ref.name}'", entity=canonical_name(type_ref))
        return definition

    @abstractmethod
    def create_code_type(self, type_ref: TypeRef, definition: Definition | None) -> CodeType:
        """Construct the code type for *type_ref*; *definition* is set for nominal types."""

    @abstractmethod
    def class_name(self, nm: str) -> str: ...

    @abstractmethod
    def fn_name(self, nm: str) -> str: ...

    @abstractmethod
    def var_name(self, nm: str) -> str: ...

    @abstractmethod
    def enum_variant_name(self, nm: str) -> str: ...

    @abstractmethod
    def exception_name(self, nm: str) -> str: ...

    @abstractmethod
    def ffi_type_label(self, ffi_type: FFIType) -> str: ...

    # Convenience wrappers mirroring the CodeType interface.

    def type_label(self, type_ref: TypeRef) -> str:
        return self.find(type_ref).type_label(self)

    def lower(self, nm: str, type_ref: TypeRef) -> str:
        return self.find(type_ref).lower(self, nm)

    def write(self, nm: str, target: str, type_ref: TypeRef) -> str:
        return self.find(type_ref).write(self, nm, target)

    def lift(self, nm: str, type_ref: TypeRef) -> str:
        return self.find(type_ref).lift(self, nm)

    def read(self, nm: str, type_ref: TypeRef) -> str:
        return self.find(type_ref).read(self, nm)

    def literal(self, literal: LiteralValue, type_ref: TypeRef) -> str:
        return self.find(type_ref).literal(self, literal)


class MemberDeclaration(ABC):
    """A public definition (nominal type or function) in the generated file."""

    #: Fragment group, e.g. ``"record"`` or ``"functions"``.
    kind: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """The logical name of the declared member."""

    def type_ref(self) -> TypeRef | None:
        """The nominal type this member defines, or None for functions."""
        return None

    @abstractmethod
    def definition_code(self, oracle: LanguageOracle) -> str:
        """The target-language source of the definition."""

    def imports(self, oracle: LanguageOracle) -> list[str]:
        return []


class HelperEmitter:
    """Collects helper code, emitting it at most once per rendered canonical name.

    Two distinct logical types that render to the same canonical name would
    produce clashing helper definitions, so that case is rejected.
    """

    def __init__(self, oracle: LanguageOracle) -> None:
        self._oracle = oracle
        self._emitted: dict[str, TypeRef] = {}
        self.fragments: dict[str, str] = {}
        self.imports: set[str] = set()

    def emit(self, type_ref: TypeRef) -> bool:
        """Emit the helper code of *type_ref* unless already emitted.

        Returns:
            True if the type was new, False if it had been emitted before.

        Raises:
            GenerationError: If a different type already used the same
                canonical name.
        """
        code_type = self._oracle.find(type_ref)
        name = code_type.canonical_name(self._oracle)
        previous = self._emitted.get(name)
        if previous is not None:
            if previous != type_ref:
                raise GenerationError(
                    f"Types '{canonical_name(previous)}' and '{canonical_name(type_ref)}' "
                    f"both render to the canonical name '{name}'",
                    entity=name,
                )
            return False
        self._emitted[name] = type_ref
        code = code_type.helper_code(self._oracle)
        if code:
            self.fragments[name] = code
        self.imports.update(code_type.imports(self._oracle))
        return True


@dataclass
class GeneratedBindings:
    """The output of one generation run.

    Attributes:
        language: The target language.
        fragments: Named source fragments in output order (``runtime``,
            ``helpers/<canonical name>``, ``<kind>/<name>``, ``functions``).
        files: Rendered files keyed by path relative to the output directory.
    """

    language: str
    fragments: dict[str, str] = field(default_factory=dict)
    files: dict[str, str] = field(default_factory=dict)


class MemberAggregator(ABC):
    """Assembles the runtime, helpers and member definitions into one program.

    Subclasses provide the oracle, the runtime fragment, the members and the
    final file layout; the ordering and deduplication rules live here.
    """

    #: Target language identifier, set by subclasses.
    language: str = ""

    def __init__(self, ci: ComponentInterface, config: TargetConfig) -> None:
        self.ci = ci
        self.config = config
        self.oracle = self.create_oracle(ci)

    @abstractmethod
    def create_oracle(self, ci: ComponentInterface) -> LanguageOracle: ...

    @abstractmethod
    def runtime_code(self) -> str:
        """Helper code every generated file needs, independent of the types used."""

    @abstractmethod
    def runtime_imports(self) -> list[str]: ...

    @abstractmethod
    def members(self) -> list[MemberDeclaration]:
        """Members in output order: enums, records, errors, objects, callback interfaces, functions."""

    @abstractmethod
    def render_file(self, imports: list[str], fragments: dict[str, str]) -> dict[str, str]:
        """Lay the fragments out into the final file(s)."""

    def reserved_class_names(self) -> set[str]:
        """Class names the runtime and helper code declare, unavailable to definitions."""
        return set()

    def generate(self) -> GeneratedBindings:
        """Render every fragment and the final file(s).

        Raises:
            GenerationError: On unresolvable types, invalid literals or
                name collisions.
        """
        members = self.members()
        self._check_class_names(members)
        self._check_member_names()

        fragments: dict[str, str] = {"runtime": self.runtime_code()}
        imports: set[str] = set(self.runtime_imports())

        emitter = HelperEmitter(self.oracle)
        for type_ref in self.ci.iter_types():
            emitter.emit(type_ref)
        for name, code in emitter.fragments.items():
            fragments[f"helpers/{name}"] = code
        imports.update(emitter.imports)

        function_code: list[str] = []
        for member in members:
            code = member.definition_code(self.oracle)
            imports.update(member.imports(self.oracle))
            if member.type_ref() is None:
                function_code.append(code)
            else:
                fragments[f"{member.kind}/{member.name}"] = code
        if function_code:
            fragments["functions"] = "\n\n".join(function_code)

        files = self.render_file(sorted(imports), fragments)
        return GeneratedBindings(language=self.language, fragments=fragments, files=files)

    def _check_class_names(self, members: list[MemberDeclaration]) -> None:
        reserved = self.reserved_class_names()
        seen: dict[str, str] = {}
        for member in members:
            type_ref = member.type_ref()
            if type_ref is None:
                continue
            label = self.oracle.type_label(type_ref)
            if label in reserved:
                raise GenerationError(
                    f"Definition '{member.name}' renders to the class name '{label}', "
                    "which the generated runtime already declares",
                    entity=member.name,
                )
            if label in seen:
                raise GenerationError(
                    f"Definitions '{seen[label]}' and '{member.name}' both render to the class name '{label}'",
                    entity=label,
                )
            seen[label] = member.name

    def _check_member_names(self) -> None:
        """Reject distinct names that render to the same identifier within one scope."""
        ci = self.ci
        oracle = self.oracle
        _check_scope([f.name for f in ci.functions], oracle.fn_name, "Functions", ci.namespace)
        for func in ci.functions:
            _check_arguments(oracle, func.arguments, func.name)
        for record in ci.records:
            _check_scope([f.name for f in record.fields], oracle.var_name, "Fields", record.name)
        for definition in (*ci.enums, *ci.errors):
            variants = definition.variants
            _check_scope([v.name for v in variants], oracle.enum_variant_name, "Variants", definition.name)
            for variant in variants:
                owner = f"{definition.name}.{variant.name}"
                _check_scope([f.name for f in variant.fields], oracle.var_name, "Fields", owner)
        for obj in ci.objects:
            callables = [*obj.alternate_constructors, *obj.methods]
            _check_scope([c.name for c in callables], oracle.fn_name, "Methods", obj.name)
            for ctor in obj.constructors:
                _check_arguments(oracle, ctor.arguments, f"{obj.name}.{ctor.name}")
            for method in obj.methods:
                _check_arguments(oracle, method.arguments, f"{obj.name}.{method.name}")
        for cbi in ci.callback_interfaces:
            _check_scope([m.name for m in cbi.methods], oracle.fn_name, "Methods", cbi.name)
            for method in cbi.methods:
                _check_arguments(oracle, method.arguments, f"{cbi.name}.{method.name}")


# ################
# Implementation
# ################


def _check_arguments(oracle: LanguageOracle, arguments: Iterable[ArgumentDef], owner: str) -> None:
    _check_scope([a.name for a in arguments], oracle.var_name, "Arguments", owner)


def _check_scope(names: Iterable[str], render: Callable[[str], str], what: str, entity: str) -> None:
    seen: dict[str, str] = {}
    for name in names:
        rendered = render(name)
        if rendered in seen:
            raise GenerationError(
                f"{what} '{seen[rendered]}' and '{name}' both render to the name '{rendered}'",
                entity=entity,
            )
        seen[rendered] = name
