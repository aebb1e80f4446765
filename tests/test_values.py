"""Tests for the value model and its per-format renderings."""

import datetime as dt
import decimal
import json
import math

import pytest
from pydantic import ValidationError

from gold_digger.core.exceptions import EncodingHazardError, NonFiniteNumberError
from gold_digger.core.values import (
    JSON_SAFE_INTEGER,
    NULL,
    U64_MAX,
    Boolean,
    Bytes,
    Decimal,
    Float,
    Integer,
    Null,
    Temporal,
    Text,
    UnsignedInteger,
    from_python,
    to_csv_field,
    to_json_value,
    to_tab_field,
)

# -- Construction --


@pytest.mark.unit
class TestConstruction:
    def test_null_instances_are_equal(self):
        assert Null() == NULL

    def test_null_differs_from_empty_text(self):
        assert NULL != Text("")

    def test_variants_are_frozen(self):
        value = Integer(1)
        with pytest.raises((AttributeError, TypeError, ValidationError)):
            value.value = 2  # type: ignore[misc]

    def test_integer_range_enforced(self):
        Integer(2**63 - 1)
        Integer(-(2**63))
        with pytest.raises(ValidationError):
            Integer(2**63)

    def test_unsigned_range_enforced(self):
        UnsignedInteger(U64_MAX)
        with pytest.raises(ValidationError):
            UnsignedInteger(-1)
        with pytest.raises(ValidationError):
            UnsignedInteger(U64_MAX + 1)

    def test_decimal_must_parse(self):
        with pytest.raises(ValidationError, match="Invalid decimal literal"):
            Decimal("12,5")

    def test_decimal_must_be_finite(self):
        with pytest.raises(ValidationError, match="finite"):
            Decimal("NaN")

    def test_float_accepts_non_finite(self):
        assert math.isnan(Float(float("nan")).value)


# -- from_python --


@pytest.mark.unit
class TestFromPython:
    def test_none_is_null(self):
        assert from_python(None) == NULL

    def test_bool_before_int(self):
        assert from_python(True) == Boolean(True)
        assert from_python(False) == Boolean(False)

    def test_signed_int(self):
        assert from_python(-42) == Integer(-42)

    def test_bigint_unsigned(self):
        assert from_python(U64_MAX) == UnsignedInteger(U64_MAX)

    def test_int_beyond_u64_becomes_decimal(self):
        assert from_python(U64_MAX + 1) == Decimal(str(U64_MAX + 1))

    def test_float(self):
        assert from_python(2.5) == Float(2.5)

    def test_decimal(self):
        assert from_python(decimal.Decimal("123.4500")) == Decimal("123.4500")

    def test_non_finite_decimal_becomes_float(self):
        value = from_python(decimal.Decimal("Infinity"))
        assert isinstance(value, Float)
        assert value.value == math.inf

    def test_text(self):
        assert from_python("café") == Text("café")

    @pytest.mark.parametrize("raw", [b"\x00\xff", bytearray(b"\x00\xff"), memoryview(b"\x00\xff")])
    def test_binary(self, raw):
        assert from_python(raw) == Bytes(b"\x00\xff")

    def test_datetime(self):
        value = from_python(dt.datetime(2023, 12, 25, 14, 30, 45, 123456))
        assert value == Temporal("2023-12-25 14:30:45.123456")

    def test_datetime_without_microseconds(self):
        assert from_python(dt.datetime(2023, 12, 25, 0, 0)) == Temporal(
            "2023-12-25 00:00:00"
        )

    def test_aware_datetime_keeps_offset(self):
        value = from_python(dt.datetime(2024, 1, 15, 10, 30, tzinfo=dt.UTC))
        assert value == Temporal("2024-01-15 10:30:00+00:00")

    def test_date(self):
        assert from_python(dt.date(2023, 12, 25)) == Temporal("2023-12-25")

    def test_time(self):
        assert from_python(dt.time(14, 30, 45)) == Temporal("14:30:45")

    def test_timedelta_time_column(self):
        assert from_python(dt.timedelta(hours=14, minutes=30, seconds=45)) == Temporal(
            "14:30:45"
        )

    def test_timedelta_over_one_day(self):
        td = dt.timedelta(days=1, hours=2, minutes=30, seconds=45)
        assert from_python(td) == Temporal("26:30:45")

    def test_negative_timedelta(self):
        td = -dt.timedelta(hours=2, minutes=30, microseconds=5)
        assert from_python(td) == Temporal("-02:30:00.000005")

    def test_set_column(self):
        assert from_python({"b", "a"}) == Text("a,b")

    def test_unknown_type_falls_back_to_text(self):
        class Thing:
            def __str__(self):
                return "thing"

        assert from_python(Thing()) == Text("thing")


# -- CSV / Tab rendering --


@pytest.mark.unit
class TestTextRendering:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (NULL, ""),
            (Text(""), ""),
            (Boolean(True), "true"),
            (Boolean(False), "false"),
            (Integer(0), "0"),
            (Integer(-17), "-17"),
            (UnsignedInteger(U64_MAX), "18446744073709551615"),
            (Float(0.1), "0.1"),
            (Float(1e16), "1e+16"),
            (Float(-2.5), "-2.5"),
            (Decimal("12345678901234567890.123"), "12345678901234567890.123"),
            (Bytes(b"\x00\xab\xff"), "00abff"),
            (Temporal("2023-12-25"), "2023-12-25"),
        ],
    )
    def test_csv_field(self, value, expected):
        assert to_csv_field(value) == expected

    def test_float_round_trips(self):
        number = 0.1 + 0.2
        assert float(to_csv_field(Float(number))) == number

    def test_csv_non_finite_float_is_text(self):
        assert to_csv_field(Float(float("nan"))) == "nan"
        assert to_csv_field(Float(float("-inf"))) == "-inf"

    def test_csv_field_leaves_text_unescaped(self):
        assert to_csv_field(Text('a,b\n"c"')) == 'a,b\n"c"'

    def test_tab_field_escapes_hazards(self):
        assert to_tab_field(Text("a\tb\nc\rd\\e")) == "a\\tb\\nc\\rd\\\\e"

    def test_tab_field_null_and_empty_render_alike(self):
        assert to_tab_field(NULL) == ""
        assert to_tab_field(Text("")) == ""

    def test_tab_field_without_escape_rejects_tab(self):
        with pytest.raises(EncodingHazardError):
            to_tab_field(Text("a\tb"), escape=False)

    def test_tab_field_without_escape_rejects_newline(self):
        with pytest.raises(EncodingHazardError):
            to_tab_field(Text("a\nb"), escape=False)

    def test_tab_field_without_escape_keeps_backslash(self):
        assert to_tab_field(Text("C:\\temp"), escape=False) == "C:\\temp"


# -- JSON rendering --


@pytest.mark.unit
class TestJsonRendering:
    def test_null(self):
        assert to_json_value(NULL) is None

    def test_empty_text_is_empty_string(self):
        assert to_json_value(Text("")) == ""

    def test_boolean(self):
        assert to_json_value(Boolean(True)) is True

    def test_safe_integer_is_number(self):
        assert to_json_value(Integer(JSON_SAFE_INTEGER)) == JSON_SAFE_INTEGER
        assert to_json_value(Integer(-JSON_SAFE_INTEGER)) == -JSON_SAFE_INTEGER

    def test_unsafe_integer_is_string(self):
        assert to_json_value(Integer(JSON_SAFE_INTEGER + 1)) == str(JSON_SAFE_INTEGER + 1)
        assert to_json_value(UnsignedInteger(U64_MAX)) == str(U64_MAX)

    def test_integer_round_trips_through_json(self):
        encoded = json.dumps(to_json_value(Integer(123456789)))
        assert json.loads(encoded) == 123456789

    def test_decimal_is_string(self):
        value = to_json_value(Decimal("12345678901234567890.123"))
        assert value == "12345678901234567890.123"
        assert json.loads(json.dumps(value)) == "12345678901234567890.123"

    def test_float(self):
        assert to_json_value(Float(1.5)) == 1.5

    @pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_float_raises(self, number):
        with pytest.raises(NonFiniteNumberError):
            to_json_value(Float(number))

    def test_bytes_is_hex(self):
        assert to_json_value(Bytes(b"hi")) == "6869"

    def test_temporal_is_string(self):
        assert to_json_value(Temporal("14:30:45")) == "14:30:45"


@pytest.mark.unit
class TestDecimalNotation:
    def test_small_decimal_stays_plain(self):
        value = from_python(decimal.Decimal("0.0000000001"))
        assert value == Decimal("0.0000000001")
        assert to_csv_field(value) == "0.0000000001"
        assert to_json_value(value) == "0.0000000001"

    def test_zero_keeps_column_scale(self):
        value = from_python(decimal.Decimal("0E-10"))
        assert to_csv_field(value) == "0.0000000000"

    def test_positive_exponent_expanded(self):
        assert to_csv_field(from_python(decimal.Decimal("1E+3"))) == "1000"

    def test_scale_preserved(self):
        assert to_csv_field(from_python(decimal.Decimal("123.4500"))) == "123.4500"
