# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the Kotlin generator: naming, literals and the layout of the generated file."""

from pathlib import Path

import pytest

from ffigen.bindings import GeneratedBindings, GenerationError, get_aggregator
from ffigen.bindings.kotlin.oracle import KotlinLanguageOracle
from ffigen.bindings.kotlin.primitives import kotlin_string, typed_number
from ffigen.compiler.build import generate_bindings
from ffigen.compiler.loader import load_interface, parse_interface
from ffigen.model.entities import ComponentInterface
from ffigen.model.literals import FloatLiteral, IntLiteral, Radix, UIntLiteral
from ffigen.model.types import PrimitiveType, PrimitiveTypeRef

# ###############
# Test Helpers
# ###############

_EXAMPLE = Path(__file__).parents[2] / "interfaces" / "arith.yaml"
_EXAMPLE_FILE = "ffigen/arith/arith.kt"


def _prim(primitive: PrimitiveType) -> PrimitiveTypeRef:
    return PrimitiveTypeRef(primitive=primitive)


def _example() -> GeneratedBindings:
    return generate_bindings(load_interface(_EXAMPLE), "kotlin")


def _kotlin(source: str) -> str:
    (text,) = generate_bindings(parse_interface(source), "kotlin").files.values()
    return text


# ###############
# Naming
# ###############


class TestNaming:
    @pytest.fixture
    def oracle(self) -> KotlinLanguageOracle:
        return KotlinLanguageOracle(ComponentInterface(namespace="ns"))

    def test_case_conventions(self, oracle: KotlinLanguageOracle) -> None:
        assert oracle.class_name("http_client") == "HttpClient"
        assert oracle.fn_name("get_value") == "getValue"
        assert oracle.var_name("max_retries") == "maxRetries"
        assert oracle.enum_variant_name("toward_zero") == "TOWARD_ZERO"

    def test_keywords_are_escaped(self, oracle: KotlinLanguageOracle) -> None:
        assert oracle.fn_name("object") == "`object`"
        assert oracle.var_name("in") == "`in`"
        assert oracle.var_name("value") == "value"

    @pytest.mark.parametrize(
        "name,expected",
        [("ArithError", "ArithException"), ("Error", "Exception"), ("Failure", "Failure")],
    )
    def test_exception_name(self, oracle: KotlinLanguageOracle, name: str, expected: str) -> None:
        assert oracle.exception_name(name) == expected


# ###############
# Literals
# ###############


@pytest.mark.parametrize(
    "literal,expected",
    [
        (IntLiteral(value=5, type=_prim(PrimitiveType.INT32)), "5"),
        (IntLiteral(value=-5, type=_prim(PrimitiveType.INT64)), "-5L"),
        (UIntLiteral(value=5, type=_prim(PrimitiveType.UINT8)), "5u"),
        (UIntLiteral(value=255, radix=Radix.HEXADECIMAL, type=_prim(PrimitiveType.UINT32)), "0xffu"),
        (UIntLiteral(value=2**64 - 1, type=_prim(PrimitiveType.UINT64)), "18446744073709551615uL"),
        (IntLiteral(value=8, radix=Radix.OCTAL, type=_prim(PrimitiveType.INT16)), "0x8"),
        (FloatLiteral(text="1.5", type=_prim(PrimitiveType.FLOAT32)), "1.5f"),
        (FloatLiteral(text="2.0", type=_prim(PrimitiveType.FLOAT64)), "2.0"),
        (IntLiteral(value=3, type=_prim(PrimitiveType.FLOAT64)), "3.0"),
        (IntLiteral(value=3, type=_prim(PrimitiveType.FLOAT32)), "3.0f"),
        (IntLiteral(value=16, radix=Radix.HEXADECIMAL, type=_prim(PrimitiveType.FLOAT64)), "0x10.toDouble()"),
    ],
)
def test_typed_number(literal, expected: str) -> None:
    assert typed_number(literal) == expected


@pytest.mark.parametrize(
    "literal,message",
    [
        (IntLiteral(value=-1, type=_prim(PrimitiveType.UINT8)), "Negative literal -1"),
        (FloatLiteral(text="0.5", type=_prim(PrimitiveType.INT32)), "Float literal 0.5"),
        (IntLiteral(value=1, type=_prim(PrimitiveType.STRING)), "non-numeric type"),
    ],
)
def test_typed_number_rejects_mismatched_types(literal, message: str) -> None:
    with pytest.raises(GenerationError, match=message):
        typed_number(literal)


def test_string_literal_escapes() -> None:
    assert kotlin_string('say "hi" for $5\n') == '"say \\"hi\\" for \\$5\\n"'


def test_invalid_default_stops_generation() -> None:
    with pytest.raises(GenerationError, match="Negative literal -1"):
        _kotlin(
            "namespace: ns\n"
            "records: [{name: R, fields: [{name: x, type: {kind: primitive, primitive: u8},"
            " default: {kind: int, value: -1, type: {kind: primitive, primitive: u8}}}]}]\n"
        )


# ###############
# Generated File
# ###############


class TestGeneratedFile:
    def test_file_path_follows_package(self) -> None:
        assert list(_example().files) == [_EXAMPLE_FILE]

    def test_preamble(self) -> None:
        lines = _example().files[_EXAMPLE_FILE].splitlines()
        assert lines[0] == "// This file was generated by ffigen. Do not edit it by hand."
        suppress = lines.index('@file:Suppress("NAME_SHADOWING")')
        package = lines.index("package ffigen.arith")
        imports = [line for line in lines if line.startswith("import ")]
        assert suppress < package < lines.index(imports[0])
        assert imports == sorted(imports)
        assert "import com.sun.jna.Native" in imports

    def test_fragment_order(self) -> None:
        keys = list(_example().fragments)
        assert keys[0] == "runtime"
        assert keys[-1] == "functions"
        members = [k for k in keys if "/" in k and not k.startswith("helpers/")]
        assert members == [
            "enum/Rounding",
            "enum/Shape",
            "record/Stats",
            "error/ArithError",
            "object/Accumulator",
            "callback_interface/Logger",
        ]
        helpers = [i for i, k in enumerate(keys) if k.startswith("helpers/")]
        assert helpers == list(range(1, len(helpers) + 1))

    def test_each_helper_is_emitted_once(self) -> None:
        text = _example().files[_EXAMPLE_FILE]
        assert text.count("internal fun liftSequenceInt64(") == 1

    def test_record_with_defaults(self) -> None:
        text = _example().fragments["record/Stats"]
        assert text.startswith(
            "@ExperimentalUnsignedTypes\n"
            "data class Stats (\n"
            "    var count: UInt,\n"
            "    var mean: Double = 0.0,\n"
            "    var label: String? = null,\n"
            "    var tags: Map<String, List<Long>> = mapOf(),\n"
            "    var rounding: Rounding = Rounding.NEAREST\n"
            ") {\n"
        )

    def test_error_classes(self) -> None:
        text = _example().fragments["error/ArithError"]
        assert "sealed class ArithException : Exception()" in text
        assert "class IntegerOverflow(" in text
        assert "class DivisionByZero : ArithException()" in text
        assert "companion object ErrorHandler : CallStatusErrorHandler<ArithException>" in text

    def test_throwing_function(self) -> None:
        text = _example().fragments["functions"]
        assert "@ExperimentalUnsignedTypes\n@Throws(ArithException::class)\nfun add(" in text
        assert "nativeCallWithError(ArithException) { _status ->" in text
        assert "_UniFFILib.INSTANCE.arith_add(" in text

    def test_empty_sequence_default(self) -> None:
        text = _kotlin(
            "namespace: ns\n"
            "records: [{name: R, fields: [{name: xs,"
            " type: {kind: sequence, inner_type: {kind: primitive, primitive: i32}},"
            " default: {kind: empty_sequence}}]}]\n"
        )
        assert "var xs: List<Int> = listOf()" in text
        assert "@ExperimentalUnsignedTypes" not in text

    def test_record_holding_an_object_is_disposable(self) -> None:
        text = _kotlin(
            "namespace: ns\n"
            "objects: [{name: Handle, constructors: [{name: new}]}]\n"
            "records: [{name: Holder, fields: [{name: handle, type: {kind: object, name: Handle}}]}]\n"
        )
        assert "data class Holder (\n    var handle: Handle\n) : Disposable {" in text
        assert "Disposable.destroy(this.handle)" in text

    def test_class_name_collision(self) -> None:
        source = "namespace: ns\nrecords: [{name: ParseException}]\nerrors: [{name: ParseError}]\n"
        with pytest.raises(GenerationError, match="both render to the class name 'ParseException'"):
            _kotlin(source)
        generate_bindings(parse_interface(source), "python")

    def test_configured_library_name(self) -> None:
        assert 'Native.load("ffigen_arith", _UniFFILib::class.java)' in _example().fragments["runtime"]

    def test_output_is_deterministic(self) -> None:
        assert _example().files == _example().files

    def test_calls_run_inside_a_call_scope(self) -> None:
        text = _example().fragments["functions"]
        assert "withCallScope { _scope ->\n    nativeCallWithError(ArithException) { _status ->" in text
        assert "_scope.track(UInt64Internals.lower(a))" in text
        assert "_scope.called(_status))" in text

    def test_methods_borrow_the_receiver_for_the_call(self) -> None:
        text = _example().fragments["object/Accumulator"]
        assert "_UniFFILib.INSTANCE.arith_accumulator_total(_scope.borrow(this), _scope.called(_status))" in text
        assert "return CallScope.active.get()?.borrow(this) ?: this.callWithPointer { it }" in text


def test_unknown_language() -> None:
    with pytest.raises(GenerationError, match=r"Unsupported target language 'swift' \(supported: kotlin, python\)"):
        get_aggregator("swift")


# ###############
# Name Collisions
# ###############


@pytest.mark.parametrize(
    "source,entity,message",
    [
        (
            "namespace: ns\nfunctions: [{name: get_value}, {name: getValue}]\n",
            "ns",
            "Functions 'get_value' and 'getValue' both render to the name 'getValue'",
        ),
        (
            "namespace: ns\nobjects: [{name: Handle, constructors: [{name: new}, {name: open_file}],"
            " methods: [{name: openFile}]}]\n",
            "Handle",
            "Methods 'open_file' and 'openFile' both render to the name 'openFile'",
        ),
        (
            "namespace: ns\nrecords: [{name: R, fields: [{name: max_retries, type: {kind: primitive, primitive: u8}},"
            " {name: maxRetries, type: {kind: primitive, primitive: u8}}]}]\n",
            "R",
            "Fields 'max_retries' and 'maxRetries' both render to the name 'maxRetries'",
        ),
        (
            "namespace: ns\ncallback_interfaces: [{name: Sink, methods: [{name: put, arguments:"
            " [{name: a_b, type: {kind: primitive, primitive: u8}},"
            " {name: aB, type: {kind: primitive, primitive: u8}}]}]}]\n",
            "Sink.put",
            "Arguments 'a_b' and 'aB' both render to the name 'aB'",
        ),
        (
            "namespace: ns\nenums: [{name: Rounding, variants: [{name: toward_zero}, {name: towardZero}]}]\n",
            "Rounding",
            "Variants 'toward_zero' and 'towardZero' both render to the name 'TOWARD_ZERO'",
        ),
        (
            "namespace: ns\nenums: [{name: Shape, variants: [{name: box, fields:"
            " [{name: side_len, type: {kind: primitive, primitive: u8}},"
            " {name: sideLen, type: {kind: primitive, primitive: u8}}]}]}]\n",
            "Shape.box",
            "Fields 'side_len' and 'sideLen' both render to the name 'sideLen'",
        ),
    ],
)
def test_names_colliding_within_a_scope(source: str, entity: str, message: str) -> None:
    with pytest.raises(GenerationError, match=message) as excinfo:
        _kotlin(source)
    assert excinfo.value.entity == entity


@pytest.mark.parametrize(
    "source,label",
    [
        ("namespace: ns\nrecords: [{name: NativeBuffer}]\n", "NativeBuffer"),
        ("namespace: ns\nrecords: [{name: Duration}]\n", "Duration"),
        (
            "namespace: ns\nrecords: [{name: StringInternals}]\n"
            "functions: [{name: f, arguments: [{name: s, type: {kind: primitive, primitive: string}}]}]\n",
            "StringInternals",
        ),
        (
            "namespace: ns\nobjects: [{name: Handle, constructors: [{name: new}]}]\n"
            "records: [{name: HandleInterface}]\n",
            "HandleInterface",
        ),
    ],
)
def test_runtime_class_names_are_reserved(source: str, label: str) -> None:
    with pytest.raises(GenerationError, match=f"renders to the class name '{label}'") as excinfo:
        _kotlin(source)
    assert excinfo.value.entity == label


def test_helper_names_are_only_reserved_when_emitted() -> None:
    _kotlin("namespace: ns\nrecords: [{name: StringInternals}]\n")
