# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the build driver: checking, generating and writing bindings."""

from pathlib import Path

import pytest

from ffigen.bindings import GeneratedBindings, GenerationError
from ffigen.compiler.build import TEMP_SUFFIX, check_interface, generate_bindings, write_bindings
from ffigen.compiler.loader import load_interface, parse_interface
from ffigen.config import BindingsConfig

# ###############
# Test Helpers
# ###############

_EXAMPLE = Path(__file__).parents[2] / "interfaces" / "arith.yaml"

_SELF_EMBEDDING = "namespace: ns\nrecords: [{name: Node, fields: [{name: next, type: {kind: record, name: Node}}]}]\n"

_RECURSIVE = (
    "namespace: ns\n"
    "records: [{name: Node, fields: [{name: next, type: {kind: record, name: Node}}]}]\n"
    "functions: [{name: f, return_type: {kind: record, name: Missing}}]\n"
)


def _bindings(files: dict[str, str]) -> GeneratedBindings:
    return GeneratedBindings(language="python", fragments={}, files=files)


# ###############
# Checking
# ###############


def test_check_clean_interface() -> None:
    semantic_errors, validation = check_interface(load_interface(_EXAMPLE))
    assert semantic_errors == []
    assert validation.errors == []
    assert validation.warnings == []


def test_validation_is_skipped_after_semantic_errors() -> None:
    semantic_errors, validation = check_interface(parse_interface(_RECURSIVE))
    assert [e.message for e in semantic_errors] == [
        "Undefined record type 'Missing' in return type of function 'f'"
    ]
    assert validation.errors == []


def test_validation_errors_without_semantic_errors() -> None:
    semantic_errors, validation = check_interface(parse_interface(_SELF_EMBEDDING))
    assert semantic_errors == []
    assert validation.has_errors


# ###############
# Generating
# ###############


def test_generate_python_defaults() -> None:
    bindings = generate_bindings(load_interface(_EXAMPLE), "python")
    assert bindings.language == "python"
    assert list(bindings.files) == ["arith.py"]
    assert '_UniFFILib = _LazyLibrary("ffigen_arith")' in bindings.files["arith.py"]


def test_generate_kotlin_defaults() -> None:
    bindings = generate_bindings(load_interface(_EXAMPLE), "kotlin")
    assert list(bindings.files) == ["ffigen/arith/arith.kt"]


def test_config_overrides_defaults() -> None:
    config = BindingsConfig.model_validate(
        {
            "bindings": {
                "kotlin": {"package-name": "com.example.arith", "cdylib-name": "arith_kt"},
                "python": {"cdylib-name": "arith_py"},
            }
        }
    )
    ci = load_interface(_EXAMPLE)
    kotlin = generate_bindings(ci, "kotlin", config)
    assert list(kotlin.files) == ["com/example/arith/arith.kt"]
    assert "package com.example.arith" in kotlin.files["com/example/arith/arith.kt"]
    assert '"arith_kt"' in kotlin.files["com/example/arith/arith.kt"]
    python = generate_bindings(ci, "python", config)
    assert '_UniFFILib = _LazyLibrary("arith_py")' in python.files["arith.py"]


def test_unsupported_language() -> None:
    with pytest.raises(GenerationError, match="Unsupported target language 'swift'"):
        generate_bindings(load_interface(_EXAMPLE), "swift")


def test_interface_errors_are_reported_together() -> None:
    source = (
        "namespace: ns\n"
        "records: [{name: R}, {name: R}]\n"
        "functions: [{name: f, throws: Nope}]\n"
    )
    with pytest.raises(GenerationError) as exc_info:
        generate_bindings(parse_interface(source), "python")
    assert str(exc_info.value) == (
        "Interface has errors:\n"
        "  - Duplicate definition name 'R'\n"
        "  - 'throws' of function 'f' names 'Nope', which is not a declared error"
    )


def test_validation_errors_stop_generation() -> None:
    ci = parse_interface(_SELF_EMBEDDING)
    with pytest.raises(GenerationError, match="Recursive value type without indirection: Node -> Node"):
        generate_bindings(ci, "kotlin")


def test_generation_is_deterministic() -> None:
    ci = load_interface(_EXAMPLE)
    for language in ("kotlin", "python"):
        assert generate_bindings(ci, language) == generate_bindings(ci, language)


# ###############
# Writing
# ###############


def test_write_creates_directories(tmp_path: Path) -> None:
    written = write_bindings(_bindings({"a/b/c.kt": "one", "top.py": "two"}), tmp_path)
    assert written == [tmp_path / "a" / "b" / "c.kt", tmp_path / "top.py"]
    assert (tmp_path / "a" / "b" / "c.kt").read_text(encoding="utf-8") == "one"
    assert (tmp_path / "top.py").read_text(encoding="utf-8") == "two"


def test_write_replaces_existing_files(tmp_path: Path) -> None:
    (tmp_path / "arith.py").write_text("old", encoding="utf-8")
    write_bindings(_bindings({"arith.py": "new"}), tmp_path)
    assert (tmp_path / "arith.py").read_text(encoding="utf-8") == "new"
    assert list(tmp_path.glob(f"*{TEMP_SUFFIX}")) == []


def test_failed_write_leaves_existing_files_untouched(tmp_path: Path) -> None:
    (tmp_path / "arith.py").write_text("old", encoding="utf-8")
    (tmp_path / "blocked").write_text("a file, not a directory", encoding="utf-8")
    files = {"arith.py": "new", "blocked/inner.py": "never written"}
    with pytest.raises(GenerationError, match="Cannot write bindings to"):
        write_bindings(_bindings(files), tmp_path)
    assert (tmp_path / "arith.py").read_text(encoding="utf-8") == "old"
    assert list(tmp_path.rglob(f"*{TEMP_SUFFIX}")) == []
