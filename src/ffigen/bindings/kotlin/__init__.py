# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Kotlin (JNA) binding generator."""

from ffigen.bindings.kotlin.oracle import KotlinLanguageOracle
from ffigen.bindings.kotlin.wrapper import KotlinBindings

__all__ = ["KotlinBindings", "KotlinLanguageOracle"]
