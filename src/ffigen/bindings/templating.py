# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Minimal template rendering for generated source fragments.

Templates use ``$name`` / ``${name}`` placeholders and ``$$`` for a literal
dollar sign. Every placeholder must be supplied; unknown keys are ignored.
"""

from __future__ import annotations

import string
import textwrap

# ###############
# Public Interface
# ###############


class TemplateError(Exception):
    """Raised when a template is malformed or a placeholder has no value."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


def render(template: str, **data: object) -> str:
    """Substitute *data* into *template*.

    Values are converted with ``str()``.

    Raises:
        TemplateError: If a placeholder has no value in *data*, or the
            template contains an invalid placeholder.
    """
    try:
        return string.Template(template).substitute(data)
    except KeyError as exc:
        raise TemplateError(f"Missing template value '{exc.args[0]}'") from exc
    except ValueError as exc:
        raise TemplateError(f"Malformed template: {exc}") from exc


def indent(code: str, level: int, width: int = 4) -> str:
    """Indent every non-blank line of *code* by *level* steps of *width* spaces."""
    return textwrap.indent(code, " " * (level * width))


def block(lines: list[str], empty: str) -> str:
    """Join *lines* with newlines, or return *empty* when there are none."""
    return "\n".join(lines) if lines else empty
