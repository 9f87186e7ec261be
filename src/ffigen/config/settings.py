# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML loader for the ``ffigen.yaml`` configuration file.

The configuration only customizes details of the generated code that do not
affect the native component: the package a Kotlin file is placed in and the
name of the shared library the bindings load. Anything left unset falls back
to a default derived from the component namespace.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = "ffigen.yaml"

LANGUAGES = ("kotlin", "python")


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


class KotlinSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    package_name: str | None = Field(default=None, alias="package-name", pattern=r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")
    cdylib_name: str | None = Field(default=None, alias="cdylib-name", min_length=1)


class PythonSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    cdylib_name: str | None = Field(default=None, alias="cdylib-name", min_length=1)


class TargetSettings(BaseModel):
    """Per-language sections under the ``bindings`` key."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kotlin: KotlinSettings = Field(default_factory=KotlinSettings)
    python: PythonSettings = Field(default_factory=PythonSettings)


class BindingsConfig(BaseModel):
    """Top-level model of ``ffigen.yaml``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    bindings: TargetSettings = Field(default_factory=TargetSettings)


@dataclass(frozen=True)
class TargetConfig:
    """Fully resolved settings for generating one target language.

    Attributes:
        package_name: Package (namespace) of the generated code.
        cdylib_name: Name of the shared library loaded at runtime.
    """

    package_name: str
    cdylib_name: str


def load_config(path: Path) -> BindingsConfig:
    """Load and validate a configuration file.

    An empty file is treated as an empty configuration.

    Raises:
        ConfigError: If the file cannot be read, contains invalid YAML, or
            does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config must be a YAML mapping")

    try:
        return BindingsConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file '{path}': {exc}") from exc


def resolve_target_config(config: BindingsConfig | None, language: str, namespace: str) -> TargetConfig:
    """Merge the settings for *language* with the namespace-derived defaults.

    Args:
        config: The loaded configuration, or None to use defaults only.
        language: One of :data:`LANGUAGES`.
        namespace: The component namespace.

    Raises:
        ConfigError: If *language* is not a supported target.
    """
    if language not in LANGUAGES:
        raise ConfigError(f"Unsupported target language '{language}'")
    settings = getattr((config or BindingsConfig()).bindings, language)
    package_name = getattr(settings, "package_name", None)
    return TargetConfig(
        package_name=package_name or f"ffigen.{namespace}",
        cdylib_name=settings.cdylib_name or f"ffigen_{namespace}",
    )
