# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Case conversion shared by every target language.

All conversions go through a single word splitter, so the rendering of a
name depends only on its words and not on the convention it was written in:
``"http_request"``, ``"HttpRequest"`` and ``"httpRequest"`` all render to the
same identifier. Every conversion is idempotent.
"""

from __future__ import annotations

import re

# ###############
# Public Interface
# ###############


def split_words(name: str) -> list[str]:
    """Split *name* into its words.

    Underscores, hyphens and spaces separate words, as do lower-to-upper case
    boundaries and the end of an acronym (``"HTTPServer"`` gives ``HTTP`` and
    ``Server``). Digits stay attached to the word they follow.
    """
    words: list[str] = []
    for chunk in _SEPARATORS.split(name):
        words.extend(_WORD.findall(chunk))
    return words


def upper_camel(name: str) -> str:
    """``"http_request"`` -> ``"HttpRequest"``."""
    return "".join(_capitalize(w) for w in split_words(name))


def lower_camel(name: str) -> str:
    """``"http_request"`` -> ``"httpRequest"``."""
    words = split_words(name)
    if not words:
        return ""
    return words[0].lower() + "".join(_capitalize(w) for w in words[1:])


def snake(name: str) -> str:
    """``"HttpRequest"`` -> ``"http_request"``."""
    return "_".join(w.lower() for w in split_words(name))


def shouty_snake(name: str) -> str:
    """``"httpRequest"`` -> ``"HTTP_REQUEST"``."""
    return "_".join(w.upper() for w in split_words(name))


# ################
# Implementation
# ################

_SEPARATORS = re.compile(r"[_\-\s]+")
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+\d*|[A-Z]+\d*|\d+")


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()
