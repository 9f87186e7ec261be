# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Configuration of the generated bindings."""

from ffigen.config.settings import (
    CONFIG_FILE_NAME,
    LANGUAGES,
    BindingsConfig,
    ConfigError,
    KotlinSettings,
    PythonSettings,
    TargetConfig,
    TargetSettings,
    load_config,
    resolve_target_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "LANGUAGES",
    "BindingsConfig",
    "ConfigError",
    "KotlinSettings",
    "PythonSettings",
    "TargetConfig",
    "TargetSettings",
    "load_config",
    "resolve_target_config",
]
