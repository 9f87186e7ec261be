# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""ctypes-based Python bindings."""

from ffigen.bindings.python.oracle import PythonLanguageOracle
from ffigen.bindings.python.wrapper import PythonBindings

__all__ = [
    "PythonBindings",
    "PythonLanguageOracle",
]
