# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Validation checks for component interfaces (recursion, empty definitions)."""

from ffigen.validation.checks import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate,
)

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate",
]
