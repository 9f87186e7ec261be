#!/usr/bin/env python3
# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run all CI checks locally: format, lint, type check, tests, smoke generation and build."""

import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

SMOKE_DIR = "build/smoke"

STEPS: list[tuple[str, list[str]]] = [
    ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/"]),
    ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/"]),
    ("Type check", ["uv", "run", "ty", "check", "src/"]),
    ("Tests", ["uv", "run", "pytest", "--cov=ffigen", "--cov-report=term-missing"]),
    ("Check example interface", ["uv", "run", "ffigen", "check", "interfaces/arith.yaml"]),
    (
        "Generate Kotlin bindings",
        ["uv", "run", "ffigen", "generate", "interfaces/arith.yaml", "--language", "kotlin", "--out-dir", SMOKE_DIR],
    ),
    (
        "Generate Python bindings",
        ["uv", "run", "ffigen", "generate", "interfaces/arith.yaml", "--language", "python", "--out-dir", SMOKE_DIR],
    ),
    ("Build", ["uv", "build"]),
]


def main() -> int:
    """Run all CI steps and report results. Later steps run even if earlier ones fail."""
    results: list[tuple[str, bool, float]] = []

    for name, cmd in STEPS:
        sep = chalk.blue("=" * 60)
        print(f"\n{sep}")
        print(chalk.blue(name))
        print(sep)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        elapsed = time.monotonic() - start
        results.append((name, proc.returncode == 0, elapsed))

    _print_summary(results)
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################


def _repo_root() -> Path:
    return Path(__file__).parent.parent


def _print_summary(results: list[tuple[str, bool, float]]) -> None:
    sep = "=" * 60
    print(f"\n{chalk.blue(sep)}")
    print(chalk.blue("  Summary"))
    print(chalk.blue(sep))
    for name, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        status = "PASS" if passed else "FAIL"
        print(colour(f"  {status}  {name} ({elapsed:.1f}s)"))
    print()


if __name__ == "__main__":
    sys.exit(main())
