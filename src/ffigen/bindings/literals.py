# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Checks and digit rendering shared by the literal renderers of every target."""

from __future__ import annotations

from ffigen.bindings.backend import GenerationError
from ffigen.model.literals import FloatLiteral, IntLiteral, UIntLiteral, format_number
from ffigen.model.types import (
    FLOAT_TYPES,
    INTEGER_TYPES,
    UNSIGNED_TYPES,
    PrimitiveType,
    PrimitiveTypeRef,
    canonical_name,
)

# ###############
# Public Interface
# ###############


def numeric_type(literal: IntLiteral | UIntLiteral | FloatLiteral) -> PrimitiveType:
    """Return the numeric primitive *literal* is typed as.

    Raises:
        GenerationError: If the literal's type is not numeric, if a float
            literal is typed as an integer, or if a negative value is typed
            as unsigned.
    """
    type_ref = literal.type
    if not isinstance(type_ref, PrimitiveTypeRef) or type_ref.primitive not in INTEGER_TYPES | FLOAT_TYPES:
        raise GenerationError(
            f"Numeric literal {number_text(literal)} has non-numeric type '{canonical_name(type_ref)}'",
            entity=canonical_name(type_ref),
        )
    p = type_ref.primitive
    if isinstance(literal, FloatLiteral) and p not in FLOAT_TYPES:
        raise GenerationError(
            f"Float literal {literal.text} has integer type '{canonical_name(type_ref)}'",
            entity=canonical_name(type_ref),
        )
    if not isinstance(literal, FloatLiteral) and literal.value < 0 and p in UNSIGNED_TYPES:
        raise GenerationError(
            f"Negative literal {literal.value} has unsigned type '{canonical_name(type_ref)}'",
            entity=canonical_name(type_ref),
        )
    return p


def number_text(literal: IntLiteral | UIntLiteral | FloatLiteral) -> str:
    """The digits of *literal*: floats keep their source text, integers go through :func:`format_number`."""
    if isinstance(literal, FloatLiteral):
        return literal.text
    return format_number(literal)
