# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Behavioral tests for generated Python bindings.

The generated module is imported from a temporary directory and bound to a
stand-in native library written in Python. The stand-in allocates buffers
from Python memory and tracks them by address, so every test can check that
each buffer crossing the boundary was freed exactly once.
"""

import ctypes
import datetime
import gc
import importlib.util
import struct
import threading
import time
from pathlib import Path

import pytest

from ffigen.compiler.build import generate_bindings, write_bindings
from ffigen.compiler.loader import parse_interface

# ###############
# Test Helpers
# ###############

_INTERFACE = """
namespace: calc

enums:
  - name: Rounding
    variants: [{name: nearest}, {name: toward_zero}]
  - name: Shape
    variants:
      - name: circle
        fields: [{name: radius, type: {kind: primitive, primitive: f64}}]
      - name: point

records:
  - name: Stats
    fields:
      - {name: count, type: {kind: primitive, primitive: u32}}
      - name: mean
        type: {kind: primitive, primitive: f64}
        default: {kind: float, text: "0.0", type: {kind: primitive, primitive: f64}}
      - name: label
        type: {kind: optional, inner_type: {kind: primitive, primitive: string}}
        default: {kind: "null"}
      - name: tags
        type: {kind: map, value_type: {kind: sequence, inner_type: {kind: primitive, primitive: i64}}}
        default: {kind: empty_map}
      - name: rounding
        type: {kind: enum, name: Rounding}
        default: {kind: enum, variant: nearest, type: {kind: enum, name: Rounding}}

errors:
  - name: CalcError
    variants:
      - name: integer_overflow
        fields:
          - {name: a, type: {kind: primitive, primitive: u64}}
          - {name: b, type: {kind: primitive, primitive: u64}}
      - name: negative_input

objects:
  - name: Counter
    constructors:
      - name: new
        arguments:
          - name: start
            type: {kind: primitive, primitive: i64}
            default: {kind: int, value: 0, type: {kind: primitive, primitive: i64}}
      - name: from_values
        arguments:
          - {name: values, type: {kind: sequence, inner_type: {kind: primitive, primitive: i64}}}
    methods:
      - name: add
        arguments: [{name: value, type: {kind: primitive, primitive: i64}}]
        throws: CalcError
      - name: total
        return_type: {kind: primitive, primitive: i64}

callback_interfaces:
  - name: Logger
    methods:
      - name: log
        arguments: [{name: message, type: {kind: primitive, primitive: string}}]
      - name: elapsed
        arguments: [{name: since, type: {kind: primitive, primitive: timestamp}}]
        return_type: {kind: primitive, primitive: duration}
      - name: check
        arguments: [{name: value, type: {kind: primitive, primitive: i32}}]
        return_type: {kind: primitive, primitive: bool}
        throws: CalcError

functions:
  - name: add
    arguments:
      - {name: a, type: {kind: primitive, primitive: u64}}
      - {name: b, type: {kind: primitive, primitive: u64}}
    return_type: {kind: primitive, primitive: u64}
    throws: CalcError
  - name: describe
    arguments: [{name: shape, type: {kind: enum, name: Shape}}]
    return_type: {kind: primitive, primitive: string}
  - name: echo_nested
    arguments:
      - name: value
        type: &nested
          kind: sequence
          inner_type: {kind: optional, inner_type: {kind: map, value_type: {kind: primitive, primitive: i32}}}
    return_type: *nested
  - name: echo_stats
    arguments: [{name: stats, type: {kind: record, name: Stats}}]
    return_type: {kind: record, name: Stats}
  - name: echo_rounding
    arguments: [{name: value, type: {kind: enum, name: Rounding}}]
    return_type: {kind: enum, name: Rounding}
  - name: echo_timestamp
    arguments: [{name: value, type: {kind: primitive, primitive: timestamp}}]
    return_type: {kind: primitive, primitive: timestamp}
  - name: echo_duration
    arguments: [{name: value, type: {kind: primitive, primitive: duration}}]
    return_type: {kind: primitive, primitive: duration}
  - name: total_of
    arguments: [{name: counter, type: {kind: object, name: Counter}}]
    return_type: {kind: primitive, primitive: i64}
  - name: set_logger
    arguments: [{name: logger, type: {kind: callback_interface, name: Logger}}]
  - name: fail
  - name: pair
    arguments:
      - {name: label, type: {kind: primitive, primitive: string}}
      - {name: count, type: {kind: primitive, primitive: u8}}
    return_type: {kind: primitive, primitive: string}
  - name: echo_shape
    arguments: [{name: shape, type: {kind: enum, name: Shape}}]
    return_type: {kind: enum, name: Shape}
  - name: echo_i8
    arguments: [{name: value, type: {kind: primitive, primitive: i8}}]
    return_type: {kind: primitive, primitive: i8}
  - name: echo_i16
    arguments: [{name: value, type: {kind: primitive, primitive: i16}}]
    return_type: {kind: primitive, primitive: i16}
  - name: echo_u8
    arguments: [{name: value, type: {kind: primitive, primitive: u8}}]
    return_type: {kind: primitive, primitive: u8}
  - name: echo_u16
    arguments: [{name: value, type: {kind: primitive, primitive: u16}}]
    return_type: {kind: primitive, primitive: u16}
  - name: echo_i32
    arguments: [{name: value, type: {kind: primitive, primitive: i32}}]
    return_type: {kind: primitive, primitive: i32}
  - name: echo_f32
    arguments: [{name: value, type: {kind: primitive, primitive: f32}}]
    return_type: {kind: primitive, primitive: f32}
  - name: echo_bool
    arguments: [{name: value, type: {kind: primitive, primitive: bool}}]
    return_type: {kind: primitive, primitive: bool}
"""

_UTC = datetime.timezone.utc


def _pack_string(value: str) -> bytes:
    data = value.encode("utf-8")
    return struct.pack(">i", len(data)) + data


def _set_status(status, code: int, error_buf) -> None:
    status.contents.code = code
    status.contents.error_buf = error_buf


class _FakeLibrary:
    """Stands in for the native ``calc`` library."""

    def __init__(self, module) -> None:
        self.module = module
        self.live: dict[int, ctypes.Array] = {}
        self.callbacks: dict[str, object] = {}
        self.counters: dict[int, int] = {}
        self.freed_objects: list[int] = []
        self.define("ffi_calc_buffer_alloc", self._alloc)
        self.define("ffi_calc_buffer_free", self._free)
        self.define("ffi_calc_logger_init_callback", self._register_logger)
        self.define("ffi_calc_counter_object_free", lambda ptr, status: self.freed_objects.append(ptr))

    def define(self, symbol: str, fn) -> None:
        setattr(self, symbol, fn)

    def buffer(self, data: bytes):
        """Allocate a native buffer holding *data*, as the native side would."""
        buf = self._alloc(len(data), None)
        ctypes.memmove(buf.data, data, len(data))
        buf.len = len(data)
        return buf

    def consume(self, buf) -> bytes:
        """Read and free a buffer handed over by the bindings."""
        data = buf.to_bytes()
        self._free(buf, None)
        return data

    def echo(self, buf, status):
        return self.buffer(self.consume(buf))

    def invoke(self, handle: int, method: int, args: bytes = b"") -> tuple[int, bytes | None]:
        """Call the registered logger callback the way native code would.

        Native code passes an empty, unallocated argument buffer when it frees
        the handle (method index 0).
        """
        out = self.module._NativeBuffer()
        args_buf = self.buffer(args) if method else self.module._NativeBuffer()
        code = self.callbacks["logger"](handle, method, args_buf, ctypes.byref(out))
        return code, self.consume(out) if out.data else None

    def new_counter(self, start: int) -> int:
        handle = 1000 + len(self.counters)
        self.counters[handle] = start
        return handle

    def _alloc(self, size, status):
        raw = ctypes.create_string_buffer(max(size, 1))
        self.live[ctypes.addressof(raw)] = raw
        data = ctypes.cast(raw, ctypes.POINTER(ctypes.c_char))
        return self.module._NativeBuffer(capacity=size, len=0, data=data)

    def _free(self, buf, status) -> None:
        address = ctypes.cast(buf.data, ctypes.c_void_p).value
        if address not in self.live:
            raise AssertionError(f"Buffer {address} was not allocated or was already freed")
        del self.live[address]

    def _register_logger(self, callback) -> None:
        self.callbacks["logger"] = callback


def _load_bindings(tmp_path: Path):
    """Generate, write and import the bindings, bound to a fresh stand-in library."""
    bindings = generate_bindings(parse_interface(_INTERFACE), "python")
    (path,) = write_bindings(bindings, tmp_path)
    spec = importlib.util.spec_from_file_location(f"calc_{tmp_path.name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    fake = _FakeLibrary(module)
    module._UniFFILib.install(fake)
    return module, fake


# ###############
# Scalars and Errors
# ###############


class TestFunctions:
    def test_unsigned_arguments_and_result(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_add", lambda a, b, status: a + b)
        assert module.add(2**63, 5) == 2**63 + 5

    @pytest.mark.parametrize("a,b,error", [(-1, 1, ValueError), (2**64, 0, ValueError), (1.5, 1, TypeError)])
    def test_arguments_are_checked_before_the_call(self, tmp_path: Path, a, b, error) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_add", lambda a, b, status: pytest.fail("native code must not be called"))
        with pytest.raises(error):
            module.add(a, b)

    def test_declared_error_is_raised(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)

        def add(a, b, status):
            _set_status(status, 1, fake.buffer(struct.pack(">iQQ", 1, a, b)))
            return 0

        fake.define("calc_add", add)
        with pytest.raises(module.CalcError.IntegerOverflow) as exc_info:
            module.add(2**64 - 1, 1)
        assert isinstance(exc_info.value, module.CalcError)
        assert (exc_info.value.a, exc_info.value.b) == (2**64 - 1, 1)
        assert str(exc_info.value) == f"CalcError.IntegerOverflow(a={2**64 - 1}, b=1)"
        assert fake.live == {}

    def test_panic_message(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_fail", lambda status: _set_status(status, 2, fake.buffer(_pack_string("boom"))))
        with pytest.raises(module.InternalError, match="boom"):
            module.fail()
        assert fake.live == {}

    def test_undeclared_error(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_fail", lambda status: _set_status(status, 1, fake.buffer(b"\x00\x00\x00\x01")))
        with pytest.raises(module.InternalError, match="undeclared error"):
            module.fail()
        assert fake.live == {}

    def test_invalid_status_code(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_fail", lambda status: setattr(status.contents, "code", 7))
        with pytest.raises(module.InternalError, match="Invalid call status: 7"):
            module.fail()

    def test_public_names(self, tmp_path: Path) -> None:
        module, _ = _load_bindings(tmp_path)
        assert module.__all__ == [
            "InternalError",
            "ObjectDestroyedError",
            "Rounding",
            "Shape",
            "Stats",
            "Counter",
            "Logger",
            "CalcError",
            "add",
            "describe",
            "echo_nested",
            "echo_stats",
            "echo_rounding",
            "echo_timestamp",
            "echo_duration",
            "total_of",
            "set_logger",
            "fail",
            "pair",
            "echo_shape",
            "echo_i8",
            "echo_i16",
            "echo_u8",
            "echo_u16",
            "echo_i32",
            "echo_f32",
            "echo_bool",
        ]

    @pytest.mark.parametrize(
        "primitive,values,received",
        [
            ("i8", [-128, 0, 127], [-128, 0, 127]),
            ("i16", [-(2**15), 2**15 - 1], [-(2**15), 2**15 - 1]),
            ("u8", [0, 255], [0, 255]),
            ("u16", [0, 2**16 - 1], [0, 2**16 - 1]),
            ("i32", [-(2**31), 2**31 - 1], [-(2**31), 2**31 - 1]),
            ("f32", [-1.5, 3], [-1.5, 3.0]),
            ("bool", [True, False], [1, 0]),
        ],
    )
    def test_scalar_round_trip(self, tmp_path: Path, primitive: str, values: list, received: list) -> None:
        module, fake = _load_bindings(tmp_path)
        seen = []

        def echo(value, status):
            seen.append(value)
            return value

        fake.define(f"calc_echo_{primitive}", echo)
        echo_fn = getattr(module, f"echo_{primitive}")
        assert [echo_fn(v) for v in values] == values
        assert seen == received

    @pytest.mark.parametrize(
        "primitive,value,error",
        [
            ("i8", 128, ValueError),
            ("i8", -129, ValueError),
            ("i16", 2**15, ValueError),
            ("u8", -1, ValueError),
            ("u8", 256, ValueError),
            ("u16", 2**16, ValueError),
            ("i32", 2**31, ValueError),
            ("i32", 1.0, TypeError),
            ("i32", True, TypeError),
            ("f32", "1.5", TypeError),
            ("bool", 1, TypeError),
        ],
    )
    def test_scalar_out_of_range(self, tmp_path: Path, primitive: str, value, error) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define(f"calc_echo_{primitive}", lambda value, status: pytest.fail("native code must not be called"))
        with pytest.raises(error):
            getattr(module, f"echo_{primitive}")(value)

    def test_native_boolean_must_be_zero_or_one(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_bool", lambda value, status: 2)
        with pytest.raises(module.InternalError, match="Unexpected byte for Boolean: 2"):
            module.echo_bool(True)

    def test_arguments_lowered_before_a_failure_are_freed(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_pair", lambda label, count, status: pytest.fail("native code must not be called"))
        with pytest.raises(ValueError, match="256 is out of range"):
            module.pair("first", 256)
        with pytest.raises(TypeError):
            module.pair("first", "42")
        assert fake.live == {}

    def test_native_code_owns_the_arguments_it_received(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)

        def pair(label, count, status):
            text = fake.consume(label)[4:].decode("utf-8")
            return fake.buffer(_pack_string(f"{text}={count}"))

        fake.define("calc_pair", pair)
        assert module.pair("first", 42) == "first=42"
        assert fake.live == {}

    def test_arguments_consumed_by_a_failed_call_are_not_freed_twice(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)

        def pair(label, count, status):
            fake.consume(label)
            _set_status(status, 2, fake.buffer(_pack_string("boom")))

        fake.define("calc_pair", pair)
        with pytest.raises(module.InternalError, match="boom"):
            module.pair("first", 1)
        assert fake.live == {}


# ###############
# Serialized Values
# ###############


class TestSerializedValues:
    def test_nested_compounds(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_nested", fake.echo)
        value = [None, {"a": 1, "b": -2}, {}]
        assert module.echo_nested(value) == value
        assert fake.live == {}

    def test_nested_compound_wire_format(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        received = []

        def echo(buf, status):
            received.append(fake.consume(buf))
            return fake.buffer(received[-1])

        fake.define("calc_echo_nested", echo)
        module.echo_nested([None, {"k": 7}])
        assert received == [
            struct.pack(">iB", 2, 0) + struct.pack(">Bi", 1, 1) + _pack_string("k") + struct.pack(">i", 7)
        ]

    def test_record_defaults(self, tmp_path: Path) -> None:
        module, _ = _load_bindings(tmp_path)
        first = module.Stats(count=1)
        second = module.Stats(count=1)
        assert first == second
        assert (first.mean, first.label, first.tags, first.rounding) == (0.0, None, {}, module.Rounding.NEAREST)
        first.tags["x"] = [1]
        assert second.tags == {}

    def test_record_wire_format(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        received = []

        def echo(buf, status):
            received.append(fake.consume(buf))
            return fake.buffer(received[-1])

        fake.define("calc_echo_stats", echo)
        stats = module.Stats(count=3, label="x", tags={"k": [1]}, rounding=module.Rounding.TOWARD_ZERO)
        assert module.echo_stats(stats) == stats
        assert received == [
            struct.pack(">Id", 3, 0.0)
            + struct.pack(">B", 1)
            + _pack_string("x")
            + struct.pack(">i", 1)
            + _pack_string("k")
            + struct.pack(">iq", 1, 1)
            + struct.pack(">i", 2)
        ]
        assert fake.live == {}

    def test_record_repr(self, tmp_path: Path) -> None:
        module, _ = _load_bindings(tmp_path)
        assert repr(module.Stats(count=2, mean=1.5)) == (
            "Stats(count=2, mean=1.5, label=None, tags={}, rounding=<Rounding.NEAREST: 1>)"
        )

    def test_data_enum_wire_format(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)

        def describe(buf, status):
            data = fake.consume(buf)
            (tag,) = struct.unpack_from(">i", data)
            text = f"circle {struct.unpack_from('>d', data, 4)[0]}" if tag == 1 else f"variant {tag} {len(data)}"
            return fake.buffer(_pack_string(text))

        fake.define("calc_describe", describe)
        assert module.describe(module.Shape.CIRCLE(radius=2.5)) == "circle 2.5"
        assert module.describe(module.Shape.POINT()) == "variant 2 4"
        assert fake.live == {}

    def test_data_enum_values(self, tmp_path: Path) -> None:
        module, _ = _load_bindings(tmp_path)
        circle = module.Shape.CIRCLE(radius=1.0)
        assert isinstance(circle, module.Shape)
        assert circle == module.Shape.CIRCLE(radius=1.0)
        assert circle != module.Shape.POINT()
        assert repr(circle) == "Shape.CIRCLE(radius=1.0)"

    @pytest.mark.parametrize("shape", ["circle", "point"])
    def test_data_enum_round_trip(self, tmp_path: Path, shape: str) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_shape", fake.echo)
        value = module.Shape.CIRCLE(radius=0.25) if shape == "circle" else module.Shape.POINT()
        result = module.echo_shape(value)
        assert result == value
        assert type(result) is type(value)
        assert fake.live == {}

    def test_data_enum_invalid_discriminant(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)

        def echo_shape(buf, status):
            fake.consume(buf)
            return fake.buffer(struct.pack(">i", 3))

        fake.define("calc_echo_shape", echo_shape)
        with pytest.raises(module.InternalError, match="Invalid Shape discriminant: 3"):
            module.echo_shape(module.Shape.POINT())
        assert fake.live == {}

    def test_flat_enum(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_rounding", fake.echo)
        assert module.echo_rounding(module.Rounding.TOWARD_ZERO) is module.Rounding.TOWARD_ZERO
        assert module.Rounding.TOWARD_ZERO.value == 2

    def test_invalid_discriminant(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        def echo_rounding(buf, status):
            fake.consume(buf)
            return fake.buffer(struct.pack(">i", 7))

        fake.define("calc_echo_rounding", echo_rounding)
        with pytest.raises(module.InternalError, match="Invalid Rounding discriminant: 7"):
            module.echo_rounding(module.Rounding.NEAREST)
        assert fake.live == {}

    def test_junk_data_after_value(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_rounding", lambda buf, status: fake.buffer(fake.consume(buf) + b"\x00"))
        with pytest.raises(module.InternalError, match="Junk data left in buffer"):
            module.echo_rounding(module.Rounding.NEAREST)
        assert fake.live == {}

    def test_writing_a_wrong_value_allocates_nothing(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        with pytest.raises(ValueError, match="Unexpected Rounding value"):
            module.echo_rounding("nearest")
        assert fake.live == {}

    @pytest.mark.parametrize(
        "value",
        [
            datetime.datetime(2024, 2, 29, 12, 30, 15, 123456, tzinfo=_UTC),
            datetime.datetime(1969, 12, 31, 23, 59, 58, 250000, tzinfo=_UTC),
        ],
    )
    def test_timestamps(self, tmp_path: Path, value: datetime.datetime) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_timestamp", fake.echo)
        assert module.echo_timestamp(value) == value

    def test_timestamp_before_epoch_wire_format(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        received = []

        def echo(buf, status):
            received.append(fake.consume(buf))
            return fake.buffer(received[-1])

        fake.define("calc_echo_timestamp", echo)
        module.echo_timestamp(datetime.datetime(1969, 12, 31, 23, 59, 58, 250000, tzinfo=_UTC))
        assert received == [struct.pack(">qI", -1, 750_000_000)]

    def test_durations(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        fake.define("calc_echo_duration", fake.echo)
        value = datetime.timedelta(days=1, seconds=5, microseconds=7)
        assert module.echo_duration(value) == value

    def test_negative_duration_is_rejected(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        with pytest.raises(ValueError, match="must be non-negative"):
            module.echo_duration(datetime.timedelta(seconds=-1))
        assert fake.live == {}


# ###############
# Objects
# ###############


class TestObjects:
    def _bind_counter(self, fake: _FakeLibrary) -> None:
        def add(ptr, value, status):
            if value < 0:
                _set_status(status, 1, fake.buffer(struct.pack(">i", 2)))
                return
            fake.counters[ptr] += value

        def from_values(buf, status):
            data = fake.consume(buf)
            (count,) = struct.unpack_from(">i", data)
            return fake.new_counter(sum(struct.unpack_from(f">{count}q", data, 4)))

        fake.define("calc_counter_new", lambda start, status: fake.new_counter(start))
        fake.define("calc_counter_from_values", from_values)
        fake.define("calc_counter_add", add)
        fake.define("calc_counter_total", lambda ptr, status: fake.counters[ptr])
        fake.define("calc_total_of", lambda ptr, status: fake.counters[ptr])

    def test_methods(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter(10)
        counter.add(5)
        assert counter.total() == 15
        assert module.total_of(counter) == 15

    def test_default_constructor_argument(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        assert module.Counter().total() == 0

    def test_alternate_constructor(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter.from_values([1, 2, 3])
        assert isinstance(counter, module.Counter)
        assert counter.total() == 6
        assert fake.live == {}

    def test_method_error(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter()
        with pytest.raises(module.CalcError.NegativeInput):
            counter.add(-1)
        assert fake.live == {}

    def test_destroy_frees_exactly_once(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter()
        counter.destroy()
        assert fake.freed_objects == [1000]
        with pytest.raises(module.ObjectDestroyedError):
            counter.destroy()
        with pytest.raises(module.ObjectDestroyedError):
            counter.total()
        with pytest.raises(module.ObjectDestroyedError):
            module.total_of(counter)
        del counter
        gc.collect()
        assert fake.freed_objects == [1000]

    def test_context_manager(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        with module.Counter(1) as counter:
            assert counter.total() == 1
        assert fake.freed_objects == [1000]

    def test_garbage_collection_frees(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter()
        del counter
        gc.collect()
        assert fake.freed_objects == [1000]

    def test_destroy_during_call_waits_for_the_call(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter(4)

        def total(ptr, status):
            counter.destroy()
            assert fake.freed_objects == []
            return fake.counters[ptr]

        fake.define("calc_counter_total", total)
        assert counter.total() == 4
        assert fake.freed_objects == [1000]

    def test_object_argument_stays_alive_during_the_call(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter(9)

        def total_of(ptr, status):
            counter.destroy()
            assert fake.freed_objects == []
            return fake.counters[ptr]

        fake.define("calc_total_of", total_of)
        assert module.total_of(counter) == 9
        assert fake.freed_objects == [1000]
        with pytest.raises(module.ObjectDestroyedError):
            module.total_of(counter)

    def test_call_scope_releases_borrowed_objects_on_error(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter()
        with pytest.raises(ValueError, match="lowering failed"):
            with module._UniffiCallScope() as scope:
                scope.borrow(counter)
                counter.destroy()
                assert fake.freed_objects == []
                raise ValueError("lowering failed")
        assert fake.freed_objects == [1000]

    def test_concurrent_calls_and_destroy(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        self._bind_counter(fake)
        counter = module.Counter(3)

        def total(ptr, status):
            assert ptr not in fake.freed_objects
            time.sleep(0.0005)
            assert ptr not in fake.freed_objects
            return fake.counters[ptr]

        fake.define("calc_counter_total", total)
        fake.define("calc_total_of", total)
        start = threading.Barrier(5)
        outcomes: list[int | None] = []

        def run(call) -> None:
            start.wait()
            for _ in range(50):
                try:
                    outcomes.append(call())
                except module.ObjectDestroyedError:
                    outcomes.append(None)

        calls = [counter.total, lambda: module.total_of(counter)] * 2
        threads = [threading.Thread(target=run, args=(call,)) for call in calls]
        for thread in threads:
            thread.start()
        start.wait()
        time.sleep(0.005)
        counter.destroy()
        for thread in threads:
            thread.join()
        assert fake.freed_objects == [1000]
        assert len(outcomes) == 200
        assert set(outcomes) <= {3, None}

    def test_wrong_object_type(self, tmp_path: Path) -> None:
        module, _ = _load_bindings(tmp_path)
        with pytest.raises(TypeError, match="expected Counter"):
            module.total_of(object())


# ###############
# Callback Interfaces
# ###############


class _Logger:
    def __init__(self, module) -> None:
        self.module = module
        self.messages: list[str] = []

    def log(self, message: str) -> None:
        self.messages.append(message)

    def elapsed(self, since: datetime.datetime) -> datetime.timedelta:
        return datetime.timedelta(seconds=90, microseconds=5)

    def check(self, value: int) -> bool:
        if value < 0:
            raise self.module.CalcError.NegativeInput()
        if value == 13:
            raise RuntimeError("unlucky")
        return value % 2 == 0


class TestCallbackInterfaces:
    def _register(self, tmp_path: Path):
        module, fake = _load_bindings(tmp_path)
        handles = []
        fake.define("calc_set_logger", lambda handle, status: handles.append(handle))
        logger = _Logger(module)
        module.set_logger(logger)
        return module, fake, logger, handles[0]

    def test_registered_when_library_is_installed(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        assert fake.callbacks["logger"] is module._UniffiConverterCallbackInterfaceLogger._foreign_callback

    def test_void_method(self, tmp_path: Path) -> None:
        _, fake, logger, handle = self._register(tmp_path)
        assert fake.invoke(handle, 1, _pack_string("hello")) == (0, None)
        assert logger.messages == ["hello"]
        assert fake.live == {}

    def test_method_with_result(self, tmp_path: Path) -> None:
        _, fake, _, handle = self._register(tmp_path)
        code, out = fake.invoke(handle, 2, struct.pack(">qI", 1_700_000_000, 0))
        assert code == 0
        assert out == struct.pack(">QI", 90, 5000)
        assert fake.live == {}

    def test_declared_error(self, tmp_path: Path) -> None:
        _, fake, _, handle = self._register(tmp_path)
        assert fake.invoke(handle, 3, struct.pack(">i", 4)) == (0, b"\x01")
        assert fake.invoke(handle, 3, struct.pack(">i", -1)) == (1, struct.pack(">i", 2))
        assert fake.live == {}

    def test_unexpected_exception(self, tmp_path: Path) -> None:
        _, fake, _, handle = self._register(tmp_path)
        assert fake.invoke(handle, 3, struct.pack(">i", 13)) == (2, _pack_string("RuntimeError: unlucky"))
        assert fake.live == {}

    def test_invalid_method_index(self, tmp_path: Path) -> None:
        _, fake, _, handle = self._register(tmp_path)
        assert fake.invoke(handle, 9) == (2, _pack_string("Invalid callback method index: 9"))
        assert fake.live == {}

    def test_free_releases_the_handle(self, tmp_path: Path) -> None:
        module, fake, _, handle = self._register(tmp_path)
        handle_map = module._UniffiConverterCallbackInterfaceLogger._handle_map
        assert len(handle_map) == 1
        assert fake.invoke(handle, 0) == (0, None)
        assert len(handle_map) == 0
        code, out = fake.invoke(handle, 1, _pack_string("late"))
        assert code == 2
        assert b"Unknown callback handle" in out
        assert fake.live == {}

    def test_each_registration_gets_a_new_handle(self, tmp_path: Path) -> None:
        module, fake = _load_bindings(tmp_path)
        handles = []
        fake.define("calc_set_logger", lambda handle, status: handles.append(handle))
        logger = _Logger(module)
        module.set_logger(logger)
        module.set_logger(logger)
        assert handles == [1, 2]
