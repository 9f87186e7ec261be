# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the ffigen command-line interface."""

import argparse
import sys
from pathlib import Path

from ffigen.bindings import GenerationError
from ffigen.compiler.build import check_interface, generate_bindings, write_bindings
from ffigen.compiler.loader import InterfaceLoadError, load_interface
from ffigen.config import CONFIG_FILE_NAME, LANGUAGES, BindingsConfig, ConfigError, load_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the ffigen CLI."""
    parser = argparse.ArgumentParser(
        prog="ffigen",
        description="ffigen: foreign-language bindings for native components",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate bindings for a component interface",
        description="Generate foreign-language bindings from an interface document (JSON or YAML).",
    )
    generate_parser.add_argument("interface", help="Path to the interface document")
    generate_parser.add_argument(
        "--language",
        required=True,
        choices=LANGUAGES,
        help="Target language of the bindings",
    )
    generate_parser.add_argument(
        "--out-dir",
        default=".",
        help="Directory to write the bindings to (default: current directory)",
    )
    generate_parser.add_argument(
        "--config",
        default=None,
        help=f"Configuration file (default: {CONFIG_FILE_NAME} next to the interface, if present)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check a component interface for errors",
        description="Run semantic analysis and validation on an interface document.",
    )
    check_parser.add_argument("interface", help="Path to the interface document")

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "check":
        return _cmd_check(args)
    return 0


def _load_config(args: argparse.Namespace, interface_path: Path) -> BindingsConfig | None:
    """Load the explicit configuration file, or the default one when it exists."""
    if args.config is not None:
        return load_config(Path(args.config))
    default = interface_path.parent / CONFIG_FILE_NAME
    if default.exists():
        return load_config(default)
    return None


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    interface_path = Path(args.interface)
    try:
        ci = load_interface(interface_path)
        config = _load_config(args, interface_path)
    except (InterfaceLoadError, ConfigError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _, validation = check_interface(ci)
    for warning in validation.warnings:
        print(f"Warning: {warning.message}")

    out_dir = Path(args.out_dir)
    try:
        bindings = generate_bindings(ci, args.language, config)
        written = write_bindings(bindings, out_dir)
    except GenerationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for path in written:
        print(f"Wrote {path}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    try:
        ci = load_interface(Path(args.interface))
    except InterfaceLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    semantic_errors, validation = check_interface(ci)
    for warning in validation.warnings:
        print(f"Warning: {warning.message}")
    has_errors = False
    for error in [*semantic_errors, *validation.errors]:
        print(f"Error: {error.message}", file=sys.stderr)
        has_errors = True

    if has_errors:
        return 1

    print("No issues found.")
    return 0
