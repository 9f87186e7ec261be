# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loading of interface model documents.

An interface document is a JSON or YAML mapping whose structure mirrors
:class:`~ffigen.model.entities.ComponentInterface`. JSON is a subset of
YAML, so both are read with the same loader. Type references and literals
are discriminated by their ``kind`` key:

.. code-block:: yaml

    namespace: arith
    functions:
      - name: add
        arguments:
          - {name: a, type: {kind: primitive, primitive: u64}}
          - {name: b, type: {kind: primitive, primitive: u64}}
        return_type: {kind: primitive, primitive: u64}
        throws: ArithError

In YAML, the ``kind`` of a null literal must be quoted (``kind: "null"``).
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from ffigen.model.entities import ComponentInterface

# ###############
# Public Interface
# ###############

INTERFACE_SUFFIXES = (".json", ".yaml", ".yml")


class InterfaceLoadError(Exception):
    """Raised when an interface document cannot be read or is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


def parse_interface(text: str, *, source: str = "<string>") -> ComponentInterface:
    """Parse and validate an interface document.

    Args:
        text: The JSON or YAML document.
        source: Name of the document used in error messages.

    Raises:
        InterfaceLoadError: If the text is not valid YAML, is not a mapping,
            or does not describe a valid component interface.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InterfaceLoadError(f"Invalid YAML in interface '{source}': {exc}") from exc

    if not isinstance(data, dict):
        raise InterfaceLoadError(f"{source}: interface document must be a mapping")

    try:
        return ComponentInterface.model_validate(data)
    except ValidationError as exc:
        raise InterfaceLoadError(f"Invalid interface '{source}': {exc}") from exc


def load_interface(path: Path) -> ComponentInterface:
    """Read and validate the interface document at *path*.

    Raises:
        InterfaceLoadError: If the file cannot be read or its content is
            not a valid interface document.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise InterfaceLoadError(f"Interface file not found: {path}") from None
    except OSError as exc:
        raise InterfaceLoadError(f"Cannot read interface file '{path}': {exc}") from exc
    return parse_interface(text, source=str(path))


def dump_interface(ci: ComponentInterface) -> str:
    """Serialize *ci* to a JSON document that :func:`parse_interface` accepts."""
    return json.dumps(ci.model_dump(mode="json"), indent=2)
