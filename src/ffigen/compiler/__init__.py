# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for interface documents: loading, semantic analysis and generation."""

from ffigen.compiler.build import check_interface, generate_bindings, write_bindings
from ffigen.compiler.loader import InterfaceLoadError, dump_interface, load_interface, parse_interface
from ffigen.compiler.semantic_analysis import SemanticError, analyze

__all__ = [
    "load_interface",
    "parse_interface",
    "dump_interface",
    "InterfaceLoadError",
    "analyze",
    "SemanticError",
    "check_interface",
    "generate_bindings",
    "write_bindings",
]
