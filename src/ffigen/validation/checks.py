# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Validation checks for component interfaces.

These checks operate on models that passed semantic analysis and enforce
rules beyond structural validity: value types must have a finite size on
the wire, and some definitions are suspicious without being invalid.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ffigen.model.entities import ComponentInterface, FieldDef
from ffigen.model.types import EnumTypeRef, ErrorTypeRef, RecordTypeRef, TypeRef

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal issue detected during validation.

    Bindings can still be generated, but the issue indicates a definition
    that is probably incomplete.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A fatal problem detected during validation.

    Bindings cannot be generated until it is corrected.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running the validation checks.

    Attributes:
        warnings: Non-fatal issues found during validation.
        errors: Fatal errors that prevent generation.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(ci: ComponentInterface) -> ValidationResult:
    """Run all validation checks on a semantically valid ComponentInterface.

    Checks performed:

    1. **Empty definitions** (warning): enums and errors without variants,
       records without fields and callback interfaces without methods.

    2. **Unconstructible objects** (warning): objects without any
       constructor can only be obtained from native code.

    3. **Value type recursion** (error): a record, enum or error that
       contains itself through a chain of fields, without an Optional,
       Sequence or Map in between, would have an infinite wire encoding.
       Objects and callback interfaces are passed by handle and break such
       chains as well.

    Args:
        ci: The component interface to validate.

    Returns:
        A :class:`ValidationResult` containing any warnings and errors found.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []

    warnings.extend(_check_empty_definitions(ci))
    warnings.extend(_check_unconstructible_objects(ci))
    errors.extend(_check_value_type_cycles(ci))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################


def _detect_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Detect a cycle in a directed graph using DFS.

    Uses a three-colour marking scheme (white/grey/black) to distinguish
    unvisited, in-progress, and fully-explored nodes.

    Args:
        graph: Adjacency list mapping each node to its direct neighbours.
            Nodes that appear only as neighbours (not as keys) are treated
            as having no outgoing edges.

    Returns:
        A list of node names forming the cycle with the start node repeated
        at the end (e.g. ``["A", "B", "C", "A"]``), or ``None`` if the
        graph is acyclic.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    color: dict[str, int] = {}
    path: list[str] = []

    def _dfs(node: str) -> list[str] | None:
        color[node] = GREY
        path.append(node)
        for neighbor in graph.get(node, []):
            state = color.get(neighbor, WHITE)
            if state == GREY:
                cycle_start = path.index(neighbor)
                return path[cycle_start:] + [neighbor]
            if state == WHITE:
                result = _dfs(neighbor)
                if result is not None:
                    return result
        path.pop()
        color[node] = BLACK
        return None

    for node in graph:
        if color.get(node, WHITE) == WHITE:
            result = _dfs(node)
            if result is not None:
                return result
    return None


def _check_empty_definitions(ci: ComponentInterface) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    for enum_def in ci.enums:
        if not enum_def.variants:
            warnings.append(ValidationWarning(message=f"Enum '{enum_def.name}' has no variants."))
    for error in ci.errors:
        if not error.variants:
            warnings.append(ValidationWarning(message=f"Error '{error.name}' has no variants."))
    for record in ci.records:
        if not record.fields:
            warnings.append(ValidationWarning(message=f"Record '{record.name}' has no fields."))
    for cbi in ci.callback_interfaces:
        if not cbi.methods:
            warnings.append(ValidationWarning(message=f"Callback interface '{cbi.name}' has no methods."))
    return warnings


def _check_unconstructible_objects(ci: ComponentInterface) -> list[ValidationWarning]:
    return [
        ValidationWarning(message=f"Object '{obj.name}' has no constructors and can only be returned by native code.")
        for obj in ci.objects
        if not obj.constructors
    ]


def _direct_value_refs(type_ref: TypeRef) -> list[str]:
    """Names of the value types embedded in *type_ref* without indirection."""
    if isinstance(type_ref, (RecordTypeRef, EnumTypeRef, ErrorTypeRef)):
        return [type_ref.name]
    return []


def _direct_refs_from_fields(fields: tuple[FieldDef, ...]) -> list[str]:
    result: list[str] = []
    for f in fields:
        result.extend(_direct_value_refs(f.type))
    return result


def _check_value_type_cycles(ci: ComponentInterface) -> list[ValidationError]:
    """Return an error for each distinct cycle of directly embedded value types."""
    graph: dict[str, list[str]] = {}
    for record in ci.records:
        graph[record.name] = _direct_refs_from_fields(record.fields)
    for definition in (*ci.enums, *ci.errors):
        refs: list[str] = []
        for variant in definition.variants:
            refs.extend(_direct_refs_from_fields(variant.fields))
        graph[definition.name] = refs

    errors: list[ValidationError] = []
    reported: set[frozenset[str]] = set()
    # Re-run detection with the nodes of each found cycle removed, so that
    # independent cycles are all reported.
    remaining = dict(graph)
    while True:
        cycle = _detect_cycle(remaining)
        if cycle is None:
            break
        members = frozenset(cycle)
        if members not in reported:
            reported.add(members)
            cycle_str = " -> ".join(cycle)
            errors.append(
                ValidationError(
                    message=f"Recursive value type without indirection: {cycle_str}. "
                    "Wrap one of the fields in an Optional, Sequence or Map."
                )
            )
        remaining = {k: [n for n in v if n not in members] for k, v in remaining.items() if k not in members}
    return errors
