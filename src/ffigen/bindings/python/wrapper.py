# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Assembly of the single generated Python module ``<namespace>.py``."""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle, MemberAggregator, MemberDeclaration
from ffigen.bindings.python.callback_interface import PythonCallbackInterface
from ffigen.bindings.python.enum_ import PythonEnum
from ffigen.bindings.python.error import PythonError
from ffigen.bindings.python.function import PythonFunction
from ffigen.bindings.python.object_ import PythonObject
from ffigen.bindings.python.oracle import PythonLanguageOracle
from ffigen.bindings.python.record import PythonRecord
from ffigen.bindings.python.runtime import RUNTIME_IMPORTS, runtime_code
from ffigen.model.entities import ComponentInterface
from ffigen.naming import snake

# ###############
# Public Interface
# ###############


class PythonBindings(MemberAggregator):
    """Generates a ctypes-based Python module for a component."""

    language = "python"

    def create_oracle(self, ci: ComponentInterface) -> LanguageOracle:
        return PythonLanguageOracle(ci)

    def runtime_code(self) -> str:
        return runtime_code(self.oracle, self.ci, self.config.cdylib_name)

    def runtime_imports(self) -> list[str]:
        return list(RUNTIME_IMPORTS)

    def reserved_class_names(self) -> set[str]:
        return {"InternalError", "ObjectDestroyedError"}

    def members(self) -> list[MemberDeclaration]:
        ci = self.ci
        members: list[MemberDeclaration] = []
        members.extend(PythonEnum(e, ci) for e in ci.enums)
        members.extend(PythonRecord(r, ci) for r in ci.records)
        members.extend(PythonError(e, ci) for e in ci.errors)
        members.extend(PythonObject(o, ci) for o in ci.objects)
        members.extend(PythonCallbackInterface(c, ci) for c in ci.callback_interfaces)
        members.extend(PythonFunction(f, ci.namespace) for f in ci.functions)
        return members

    def render_file(self, imports: list[str], fragments: dict[str, str]) -> dict[str, str]:
        public = self._public_names()
        parts = [_HEADER, "from __future__ import annotations", "\n".join(imports)]
        parts.extend(code.strip() for code in fragments.values())
        parts.append("__all__ = [\n" + "".join(f'    "{name}",\n' for name in public) + "]")
        return {f"{snake(self.ci.namespace)}.py": "\n\n\n".join(parts) + "\n"}

    def _public_names(self) -> list[str]:
        oracle = self.oracle
        names = ["InternalError", "ObjectDestroyedError"]
        for group in (self.ci.enums, self.ci.records, self.ci.objects, self.ci.callback_interfaces):
            names.extend(oracle.class_name(d.name) for d in group)
        names.extend(oracle.exception_name(oracle.class_name(e.name)) for e in self.ci.errors)
        names.extend(oracle.fn_name(f.name) for f in self.ci.functions)
        return names


# ################
# Implementation
# ################

_HEADER = """\
# This file was generated by ffigen. Do not edit it by hand.
#
# It binds the native library through ctypes. Values cross the boundary either
# as plain scalars or serialized into buffers owned by the native side."""
