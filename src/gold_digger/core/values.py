"""Typed database values and their per-format renderings.

A result cell is exactly one of the variants below. Each output format has
one conversion function (``to_csv_field``, ``to_tab_field``,
``to_json_value``) that matches over the full variant set, so adding a
variant fails type checking in every format at once until it is handled.

Format-wide conventions:

- NULL is an empty field in CSV/Tab and ``null`` in JSON.
- Binary payloads are lowercase hexadecimal in every format.
- Integers outside the IEEE-754 exact range become JSON strings.
- Decimals are always strings in JSON.
"""

from __future__ import annotations

import datetime as dt
import decimal
import math
from typing import Annotated, Any, Final, TypeAlias, assert_never

from pydantic import Field, field_validator
from pydantic.dataclasses import dataclass

from gold_digger.core.exceptions import EncodingHazardError, NonFiniteNumberError

I64_MIN: Final = -(2**63)
I64_MAX: Final = 2**63 - 1
U64_MAX: Final = 2**64 - 1

# Largest integer a JSON reader backed by IEEE-754 doubles holds exactly.
JSON_SAFE_INTEGER: Final = 2**53 - 1

_TAB_ESCAPES: Final = str.maketrans(
    {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r"}
)
_TAB_HAZARDS: Final = ("\t", "\n", "\r")


@dataclass(frozen=True)
class Null:
    """SQL NULL."""


@dataclass(frozen=True)
class Integer:
    value: Annotated[int, Field(ge=I64_MIN, le=I64_MAX)]


@dataclass(frozen=True)
class UnsignedInteger:
    value: Annotated[int, Field(ge=0, le=U64_MAX)]


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class Decimal:
    """Exact decimal number, kept as its digit string."""

    value: str

    @field_validator("value")
    @classmethod
    def validate_finite_decimal(cls, v: str) -> str:
        try:
            parsed = decimal.Decimal(v)
        except decimal.InvalidOperation:
            msg = f"Invalid decimal literal: {v!r}"
            raise ValueError(msg) from None
        if not parsed.is_finite():
            msg = f"Decimal must be finite, got {v!r}"
            raise ValueError(msg)
        return v


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Bytes:
    value: bytes


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class Temporal:
    """Date, time, datetime or duration already in canonical string form."""

    value: str


Value: TypeAlias = (
    Null
    | Integer
    | UnsignedInteger
    | Float
    | Decimal
    | Text
    | Bytes
    | Boolean
    | Temporal
)

NULL: Final = Null()


def _format_timedelta(td: dt.timedelta) -> str:
    # MySQL TIME spans -838:59:59..838:59:59, so hours are not wrapped at 24.
    sign = "-" if td < dt.timedelta(0) else ""
    td = abs(td)
    total_seconds = td.days * 86400 + td.seconds
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if td.microseconds:
        text += f".{td.microseconds:06d}"
    return text


def from_python(obj: Any) -> Value:
    """Convert a DB-API value returned by the driver into a Value."""
    match obj:
        case None:
            return NULL
        case bool():
            return Boolean(obj)
        case int():
            if I64_MIN <= obj <= I64_MAX:
                return Integer(obj)
            if 0 <= obj <= U64_MAX:
                return UnsignedInteger(obj)
            return Decimal(str(obj))
        case float():
            return Float(obj)
        case decimal.Decimal():
            if obj.is_finite():
                # Plain notation keeps the column scale: 0E-10 is 0.0000000000.
                return Decimal(format(obj, "f"))
            return Float(float(obj))
        case str():
            return Text(obj)
        case bytes() | bytearray() | memoryview():
            return Bytes(bytes(obj))
        # datetime is a subclass of date, so it must be matched first.
        case dt.datetime():
            return Temporal(obj.isoformat(sep=" "))
        case dt.date() | dt.time():
            return Temporal(obj.isoformat())
        case dt.timedelta():
            return Temporal(_format_timedelta(obj))
        case set() | frozenset():
            return Text(",".join(sorted(str(member) for member in obj)))
        case _:
            return Text(str(obj))


def _render_text(value: Value) -> str:
    match value:
        case Null():
            return ""
        case Boolean(value=flag):
            return "true" if flag else "false"
        case Integer(value=number) | UnsignedInteger(value=number):
            return str(number)
        case Float(value=number):
            return repr(number)
        case Decimal(value=text) | Text(value=text) | Temporal(value=text):
            return text
        case Bytes(value=payload):
            return payload.hex()
        case _:
            assert_never(value)


def to_csv_field(value: Value) -> str:
    """Render a value as an unquoted CSV field; quoting is the writer's job."""
    return _render_text(value)


def to_tab_field(value: Value, *, escape: bool = True) -> str:
    """Render a value as a tab-delimited field.

    Tab-delimited text has no quoting, so backslash, tab, LF and CR are
    written as ``\\\\``, ``\\t``, ``\\n`` and ``\\r``. With ``escape=False``
    a field containing tab, LF or CR raises EncodingHazardError instead.
    """
    return escape_tab_text(_render_text(value), escape=escape)


def escape_tab_text(text: str, *, escape: bool = True) -> str:
    if escape:
        return text.translate(_TAB_ESCAPES)
    if any(hazard in text for hazard in _TAB_HAZARDS):
        msg = f"Tab-delimited field contains a tab or line break: {text!r}"
        raise EncodingHazardError(msg)
    return text


def to_json_value(value: Value) -> Any:
    """Render a value as an object ``json.dumps`` writes losslessly."""
    match value:
        case Null():
            return None
        case Boolean(value=flag):
            return flag
        case Integer(value=number) | UnsignedInteger(value=number):
            if -JSON_SAFE_INTEGER <= number <= JSON_SAFE_INTEGER:
                return number
            return str(number)
        case Float(value=number):
            if not math.isfinite(number):
                msg = f"JSON has no representation for {number!r}"
                raise NonFiniteNumberError(msg)
            return number
        case Decimal(value=text) | Text(value=text) | Temporal(value=text):
            return text
        case Bytes(value=payload):
            return payload.hex()
        case _:
            assert_never(value)
