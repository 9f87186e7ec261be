# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Binding generators: the shared backend and one package per target language."""

from ffigen.bindings.backend import (
    CodeType,
    GeneratedBindings,
    GenerationError,
    LanguageOracle,
    MemberAggregator,
    MemberDeclaration,
)
from ffigen.bindings.kotlin import KotlinBindings
from ffigen.bindings.python import PythonBindings
from ffigen.bindings.templating import TemplateError, render

__all__ = [
    "CodeType",
    "GeneratedBindings",
    "GenerationError",
    "KotlinBindings",
    "LanguageOracle",
    "MemberAggregator",
    "MemberDeclaration",
    "PythonBindings",
    "TemplateError",
    "get_aggregator",
    "render",
]

_AGGREGATORS: dict[str, type[MemberAggregator]] = {
    "kotlin": KotlinBindings,
    "python": PythonBindings,
}


def get_aggregator(language: str) -> type[MemberAggregator]:
    """Return the aggregator class generating bindings for *language*.

    Raises:
        GenerationError: If *language* is not a supported target.
    """
    try:
        return _AGGREGATORS[language]
    except KeyError:
        supported = ", ".join(sorted(_AGGREGATORS))
        raise GenerationError(f"Unsupported target language '{language}' (supported: {supported})") from None
