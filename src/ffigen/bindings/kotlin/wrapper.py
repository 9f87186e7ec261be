# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Assembly of the single generated Kotlin file ``<package path>/<namespace>.kt``."""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberAggregator, MemberDeclaration
from ffigen.bindings.kotlin.callback_interface import KotlinCallbackInterface
from ffigen.bindings.kotlin.converters import InternalsCodeType
from ffigen.bindings.kotlin.enum_ import KotlinEnum
from ffigen.bindings.kotlin.error import KotlinError
from ffigen.bindings.kotlin.function import KotlinFunction
from ffigen.bindings.kotlin.object_ import KotlinObject
from ffigen.bindings.kotlin.oracle import KotlinLanguageOracle
from ffigen.bindings.kotlin.record import KotlinRecord
from ffigen.bindings.kotlin.runtime import RUNTIME_CLASS_NAMES, RUNTIME_IMPORTS, runtime_code
from ffigen.model.entities import ComponentInterface
from ffigen.naming import snake

# ###############
# Public Interface
# ###############


class KotlinBindings(MemberAggregator):
    """Generates a JNA-based Kotlin source file for a component."""

    language = "kotlin"

    def create_oracle(self, ci: ComponentInterface) -> LanguageOracle:
        return KotlinLanguageOracle(ci)

    def runtime_code(self) -> str:
        return runtime_code(self.oracle, self.ci, self.config.cdylib_name)

    def runtime_imports(self) -> list[str]:
        return list(RUNTIME_IMPORTS)

    def reserved_class_names(self) -> set[str]:
        oracle = self.oracle
        names = set(RUNTIME_CLASS_NAMES)
        for type_ref in self.ci.iter_types():
            code_type = oracle.find(type_ref)
            if isinstance(code_type, InternalsCodeType):
                names.add(code_type.internals(oracle))
        names.update(f"{oracle.class_name(obj.name)}Interface" for obj in self.ci.objects)
        return names

    def members(self) -> list[MemberDeclaration]:
        ci = self.ci
        members: list[MemberDeclaration] = []
        members.extend(KotlinEnum(e, ci) for e in ci.enums)
        members.extend(KotlinRecord(r, ci) for r in ci.records)
        members.extend(KotlinError(e, ci) for e in ci.errors)
        members.extend(KotlinObject(o, ci) for o in ci.objects)
        members.extend(KotlinCallbackInterface(c, ci) for c in ci.callback_interfaces)
        members.extend(KotlinFunction(f, ci) for f in ci.functions)
        return members

    def render_file(self, imports: list[str], fragments: dict[str, str]) -> dict[str, str]:
        package = self.config.package_name
        parts = [
            _HEADER,
            '@file:Suppress("NAME_SHADOWING")',
            f"package {package}",
            "\n".join(f"import {name}" for name in imports),
        ]
        parts.extend(code.strip() for code in fragments.values())
        path = "/".join([*package.split("."), f"{snake(self.ci.namespace)}.kt"])
        return {path: "\n\n".join(parts) + "\n"}


# ################
# Implementation
# ################

_HEADER = """\
// This file was generated by ffigen. Do not edit it by hand.
//
// It binds the native library through JNA. Values cross the boundary either
// as plain scalars or serialized into buffers owned by the native side."""
