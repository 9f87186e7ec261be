# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for loading interface documents."""

import json
from pathlib import Path

import pytest

from ffigen.compiler.loader import InterfaceLoadError, dump_interface, load_interface, parse_interface
from ffigen.model.literals import EmptyMapLiteral, EnumLiteral, NullLiteral
from ffigen.model.types import MapTypeRef, PrimitiveType, PrimitiveTypeRef

# ###############
# Test Helpers
# ###############

_EXAMPLE = Path(__file__).parents[2] / "interfaces" / "arith.yaml"

_MINIMAL_JSON = """
{
  "namespace": "geometry",
  "functions": [
    {
      "name": "area",
      "arguments": [{"name": "radius", "type": {"kind": "primitive", "primitive": "f64"}}],
      "return_type": {"kind": "primitive", "primitive": "f64"}
    }
  ]
}
"""

# ###############
# Public Interface
# ###############


def test_parse_json() -> None:
    ci = parse_interface(_MINIMAL_JSON)
    assert ci.namespace == "geometry"
    assert ci.functions[0].return_type == PrimitiveTypeRef(primitive=PrimitiveType.FLOAT64)


def test_parse_yaml() -> None:
    ci = parse_interface(
        "namespace: geometry\n"
        "records:\n"
        "  - name: Point\n"
        "    fields:\n"
        "      - {name: x, type: {kind: primitive, primitive: f32}}\n"
        "      - {name: y, type: {kind: primitive, primitive: f32}}\n"
    )
    assert [f.name for f in ci.records[0].fields] == ["x", "y"]


def test_load_example_interface() -> None:
    ci = load_interface(_EXAMPLE)
    assert ci.namespace == "arith"
    stats = ci.get_record_definition("Stats")
    assert stats is not None
    defaults = {f.name: f.default for f in stats.fields}
    assert defaults["count"] is None
    assert defaults["label"] == NullLiteral()
    assert defaults["tags"] == EmptyMapLiteral()
    assert isinstance(defaults["rounding"], EnumLiteral)
    assert isinstance(stats.fields[3].type, MapTypeRef)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InterfaceLoadError, match="Interface file not found"):
        load_interface(tmp_path / "missing.yaml")


def test_invalid_yaml() -> None:
    with pytest.raises(InterfaceLoadError, match="Invalid YAML in interface 'broken.yaml'"):
        parse_interface("namespace: [", source="broken.yaml")


def test_document_must_be_a_mapping() -> None:
    with pytest.raises(InterfaceLoadError, match="must be a mapping"):
        parse_interface("- namespace\n")


@pytest.mark.parametrize(
    "document",
    [
        "functions: []\n",
        "namespace: ns\nfunctions: [{name: f, return_type: {kind: pointer}}]\n",
        "namespace: ns\nrecords: [{name: R, fields: [{name: x, type: {kind: primitive, primitive: u128}}]}]\n",
        "namespace: ns\nrecords: [{name: R, fields: [{name: x, type: {kind: primitive, primitive: u8},"
        " default: {kind: uint, value: -1, type: {kind: primitive, primitive: u8}}}]}]\n",
    ],
)
def test_invalid_interfaces(document: str) -> None:
    with pytest.raises(InterfaceLoadError, match="Invalid interface"):
        parse_interface(document)


def test_dump_round_trips() -> None:
    ci = load_interface(_EXAMPLE)
    text = dump_interface(ci)
    assert json.loads(text)["namespace"] == "arith"
    assert parse_interface(text) == ci
