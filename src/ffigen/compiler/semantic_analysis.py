# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic analysis for loaded component interfaces.

Checks structural correctness of the model: duplicate names, unresolved
type references and ``throws`` clauses naming something other than an error.
This is distinct from validation (checks such as recursion without an
indirection boundary), which operates on a structurally sound model.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ffigen.model.entities import (
    ArgumentDef,
    ComponentInterface,
    ConstructorDef,
    EnumDef,
    ErrorDef,
    FieldDef,
    FunctionDef,
    MethodDef,
)
from ffigen.model.types import (
    CallbackInterfaceTypeRef,
    EnumTypeRef,
    ErrorTypeRef,
    ObjectTypeRef,
    RecordTypeRef,
    TypeRef,
    walk_type,
)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class SemanticError:
    """A structural error detected during semantic analysis.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


def analyze(ci: ComponentInterface) -> list[SemanticError]:
    """Perform semantic analysis on a component interface.

    Checks performed:
    - The namespace is not empty.
    - Duplicate definition names across enums, records, errors, objects and
      callback interfaces, and duplicate top-level function names.
    - Duplicate variant names within each enum and error.
    - Duplicate field names within each record and variant.
    - Duplicate constructor and method names within each object, and
      duplicate method names within each callback interface.
    - Duplicate argument names within each function, constructor and method.
    - Every nominal type reference resolves to a definition of its kind.
    - Every ``throws`` clause names a declared error.

    Args:
        ci: The component interface to analyze.

    Returns:
        A list of :class:`SemanticError` instances. An empty list means no
        semantic errors were found.
    """
    return _SemanticAnalyzer(ci).analyze()


# ################
# Implementation
# ################


class _SemanticAnalyzer:
    """Performs semantic analysis on a single ComponentInterface."""

    def __init__(self, ci: ComponentInterface) -> None:
        self._ci = ci
        self._names: dict[type, set[str]] = {
            EnumTypeRef: {e.name for e in ci.enums},
            RecordTypeRef: {r.name for r in ci.records},
            ErrorTypeRef: {e.name for e in ci.errors},
            ObjectTypeRef: {o.name for o in ci.objects},
            CallbackInterfaceTypeRef: {c.name for c in ci.callback_interfaces},
        }

    def analyze(self) -> list[SemanticError]:
        """Run all semantic checks and return collected errors."""
        ci = self._ci
        errors: list[SemanticError] = []

        if not ci.namespace.strip():
            errors.append(SemanticError("Namespace must not be empty"))

        # 1. Top-level names.
        definition_names = [d.name for group in (ci.enums, ci.records, ci.errors, ci.objects) for d in group]
        definition_names.extend(c.name for c in ci.callback_interfaces)
        errors.extend(_check_duplicate_names(definition_names, "Duplicate definition name '{}'"))
        errors.extend(_check_duplicate_names([f.name for f in ci.functions], "Duplicate function name '{}'"))

        # 2. Enums and errors.
        for definition in (*ci.enums, *ci.errors):
            errors.extend(self._check_variants(definition))

        # 3. Records.
        for record in ci.records:
            ctx = f"record '{record.name}'"
            errors.extend(self._check_fields(ctx, record.fields))

        # 4. Objects and callback interfaces.
        for obj in ci.objects:
            ctx = f"object '{obj.name}'"
            errors.extend(
                _check_duplicate_names([c.name for c in obj.constructors], "Duplicate constructor name '{}' in " + ctx)
            )
            errors.extend(_check_duplicate_names([m.name for m in obj.methods], "Duplicate method name '{}' in " + ctx))
            for ctor in obj.constructors:
                errors.extend(self._check_callable(f"constructor '{obj.name}.{ctor.name}'", ctor))
            for method in obj.methods:
                errors.extend(self._check_callable(f"method '{obj.name}.{method.name}'", method))
        for cbi in ci.callback_interfaces:
            ctx = f"callback interface '{cbi.name}'"
            errors.extend(_check_duplicate_names([m.name for m in cbi.methods], "Duplicate method name '{}' in " + ctx))
            for method in cbi.methods:
                errors.extend(self._check_callable(f"method '{cbi.name}.{method.name}'", method))

        # 5. Top-level functions.
        for func in ci.functions:
            errors.extend(self._check_callable(f"function '{func.name}'", func))

        return errors

    def _check_variants(self, definition: EnumDef | ErrorDef) -> list[SemanticError]:
        kind = "error" if isinstance(definition, ErrorDef) else "enum"
        ctx = f"{kind} '{definition.name}'"
        errors = _check_duplicate_names([v.name for v in definition.variants], "Duplicate variant name '{}' in " + ctx)
        for variant in definition.variants:
            errors.extend(self._check_fields(f"variant '{definition.name}.{variant.name}'", variant.fields))
        return errors

    def _check_fields(self, ctx: str, fields: Iterable[FieldDef]) -> list[SemanticError]:
        fields = list(fields)
        errors = _check_duplicate_names([f.name for f in fields], "Duplicate field name '{}' in " + ctx)
        for f in fields:
            errors.extend(self._check_type(f"field '{f.name}' of {ctx}", f.type))
        return errors

    def _check_callable(self, ctx: str, func: FunctionDef | ConstructorDef | MethodDef) -> list[SemanticError]:
        arguments: list[ArgumentDef] = list(func.arguments)
        errors = _check_duplicate_names([a.name for a in arguments], "Duplicate argument name '{}' in " + ctx)
        for arg in arguments:
            errors.extend(self._check_type(f"argument '{arg.name}' of {ctx}", arg.type))
        return_type = getattr(func, "return_type", None)
        if return_type is not None:
            errors.extend(self._check_type(f"return type of {ctx}", return_type))
        if func.throws is not None and func.throws not in self._names[ErrorTypeRef]:
            errors.append(SemanticError(f"'throws' of {ctx} names '{func.throws}', which is not a declared error"))
        return errors

    def _check_type(self, ctx: str, type_ref: TypeRef) -> list[SemanticError]:
        errors: list[SemanticError] = []
        for t in walk_type(type_ref):
            known = self._names.get(type(t))
            if known is not None and t.name not in known:
                errors.append(SemanticError(f"Undefined {t.kind} type '{t.name}' in {ctx}"))
        return errors


def _check_duplicate_names(names: list[str], fmt: str) -> list[SemanticError]:
    """Return a SemanticError for each name that appears more than once.

    Only one error per unique duplicate name is emitted. *fmt* must contain a
    single ``{}`` placeholder that will be filled with the duplicate name.
    """
    seen: set[str] = set()
    reported: set[str] = set()
    errors: list[SemanticError] = []
    for name in names:
        if name in seen:
            if name not in reported:
                errors.append(SemanticError(fmt.format(name)))
                reported.add(name)
        else:
            seen.add(name)
    return errors
