# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Typed literal values used for field and argument defaults."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from ffigen.model.types import TypeRef

# ###############
# Public Interface
# ###############


class Radix(Enum):
    """The radix a numeric literal was written in."""

    DECIMAL = "decimal"
    OCTAL = "octal"
    HEXADECIMAL = "hexadecimal"


class BooleanLiteral(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["boolean"] = "boolean"
    value: bool


class StringLiteral(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str


class NullLiteral(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["null"] = "null"


class EmptySequenceLiteral(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["empty_sequence"] = "empty_sequence"


class EmptyMapLiteral(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["empty_map"] = "empty_map"


class EnumLiteral(BaseModel):
    """A variant of an enum, e.g. ``Color.RED``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["enum"] = "enum"
    variant: str
    type: TypeRef


class IntLiteral(BaseModel):
    """A signed integer constant with its source radix and target numeric type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["int"] = "int"
    value: int
    radix: Radix = Radix.DECIMAL
    type: TypeRef


class UIntLiteral(BaseModel):
    """An unsigned integer constant with its source radix and target numeric type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["uint"] = "uint"
    value: int = _Field(ge=0)
    radix: Radix = Radix.DECIMAL
    type: TypeRef


class FloatLiteral(BaseModel):
    """A floating point constant, kept as its source text to avoid rounding."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["float"] = "float"
    text: str
    type: TypeRef


LiteralValue = Annotated[
    BooleanLiteral
    | StringLiteral
    | NullLiteral
    | EmptySequenceLiteral
    | EmptyMapLiteral
    | EnumLiteral
    | IntLiteral
    | UIntLiteral
    | FloatLiteral,
    _Field(discriminator="kind"),
]

NumericLiteral = IntLiteral | UIntLiteral | FloatLiteral


def format_number(literal: IntLiteral | UIntLiteral) -> str:
    """Render an integer literal's digits, keeping decimal as decimal.

    Octal and hexadecimal literals are both rendered with a ``0x`` prefix.
    Negative values keep a leading minus sign.
    """
    if literal.radix is Radix.DECIMAL:
        return str(literal.value)
    sign = "-" if literal.value < 0 else ""
    return f"{sign}{abs(literal.value):#x}"


EnumLiteral.model_rebuild()
IntLiteral.model_rebuild()
UIntLiteral.model_rebuild()
FloatLiteral.model_rebuild()
