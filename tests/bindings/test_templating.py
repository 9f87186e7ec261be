# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the template helpers used by the code generators."""

import pytest

from ffigen.bindings.templating import TemplateError, block, indent, render

# ###############
# Public Interface
# ###############


def test_render_substitutes_placeholders() -> None:
    assert render("fun ${name}(): $ret", name="total", ret="Long") == "fun total(): Long"


def test_substituted_values_are_not_rescanned() -> None:
    assert render("$a", a="${b}") == "${b}"


def test_escaped_dollar() -> None:
    assert render("$$x", x="unused") == "$x"


def test_missing_value() -> None:
    with pytest.raises(TemplateError, match="Missing template value 'name'"):
        render("${name}")


def test_malformed_template() -> None:
    with pytest.raises(TemplateError, match="Malformed template"):
        render("cost: $ 5")


def test_indent_skips_blank_lines() -> None:
    assert indent("a\n\nb", 2) == "        a\n\n        b"


def test_block() -> None:
    assert block(["x", "y"], "pass") == "x\ny"
    assert block([], "pass") == "pass"
