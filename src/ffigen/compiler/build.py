# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build driver: checks a component interface, generates bindings and writes them.

Generation is all-or-nothing. Every fragment is rendered in memory before
anything touches the file system, and each file is first written to a
temporary sibling which is renamed into place only once all of them were
written successfully.
"""

from __future__ import annotations

from pathlib import Path

from ffigen.bindings import GeneratedBindings, GenerationError, get_aggregator
from ffigen.compiler.semantic_analysis import SemanticError, analyze
from ffigen.config import BindingsConfig, ConfigError, resolve_target_config
from ffigen.model.entities import ComponentInterface
from ffigen.validation import ValidationResult, validate

# ###############
# Public Interface
# ###############

TEMP_SUFFIX = ".ffigen-tmp"


def check_interface(ci: ComponentInterface) -> tuple[list[SemanticError], ValidationResult]:
    """Run semantic analysis and, when it passes, validation.

    Validation assumes a structurally sound model, so it is skipped (and
    reported as an empty result) when semantic analysis found errors.
    """
    semantic_errors = analyze(ci)
    if semantic_errors:
        return semantic_errors, ValidationResult()
    return semantic_errors, validate(ci)


def generate_bindings(
    ci: ComponentInterface,
    language: str,
    config: BindingsConfig | None = None,
) -> GeneratedBindings:
    """Check *ci* and generate the bindings for *language*.

    Args:
        ci: The component interface.
        language: The target language, ``"kotlin"`` or ``"python"``.
        config: Optional configuration overriding the namespace-derived
            package and library names.

    Returns:
        The rendered fragments and files.

    Raises:
        GenerationError: If the language is unsupported, the interface has
            semantic or validation errors (all of them are reported in one
            message), or a type, literal or name cannot be rendered.
    """
    aggregator_cls = get_aggregator(language)

    semantic_errors, validation = check_interface(ci)
    messages = [e.message for e in semantic_errors] + [e.message for e in validation.errors]
    if messages:
        raise GenerationError("Interface has errors:\n" + "\n".join(f"  - {m}" for m in messages))

    try:
        target = resolve_target_config(config, language, ci.namespace)
    except ConfigError as exc:
        raise GenerationError(str(exc)) from exc
    return aggregator_cls(ci, target).generate()


def write_bindings(bindings: GeneratedBindings, out_dir: Path) -> list[Path]:
    """Write the rendered files of *bindings* below *out_dir*.

    Existing files are replaced. If any file cannot be written, the
    temporary files are removed and no existing file is modified.

    Returns:
        The paths of the written files, in output order.

    Raises:
        GenerationError: If a file cannot be written.
    """
    targets = [(out_dir / rel_path, content) for rel_path, content in bindings.files.items()]
    temporaries: list[tuple[Path, Path]] = []
    try:
        for path, content in targets:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp = path.with_name(path.name + TEMP_SUFFIX)
            temp.write_text(content, encoding="utf-8")
            temporaries.append((temp, path))
    except OSError as exc:
        _remove_temporaries(temporaries)
        raise GenerationError(f"Cannot write bindings to '{out_dir}': {exc}") from exc

    for temp, path in temporaries:
        temp.replace(path)
    return [path for _, path in temporaries]


# ################
# Implementation
# ################


def _remove_temporaries(temporaries: list[tuple[Path, Path]]) -> None:
    for temp, _ in temporaries:
        temp.unlink(missing_ok=True)
