"""JSON formatter for ResultSet output.

The document is an array of row objects keyed by column name. Columns that
share a name collapse to one key: the last value wins and the key keeps the
position of its first occurrence.
"""

from __future__ import annotations

import json
import textwrap
from typing import TYPE_CHECKING, Any

from gold_digger.core.exceptions import NonFiniteNumberError
from gold_digger.core.values import to_json_value
from gold_digger.formatters.base import iter_rows, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gold_digger.core.models import ResultSet, Row


def _row_object(names: list[str], row: Row, index: int) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for name, val in zip(names, row, strict=True):
        try:
            obj[name] = to_json_value(val)
        except NonFiniteNumberError as e:
            msg = f"Row {index}, column {name!r}: {e.message}"
            raise NonFiniteNumberError(msg) from e
    return obj


class JSONFormatter:
    def __init__(self, pretty: bool = False) -> None:
        self.pretty = pretty

    def _dump(self, obj: dict[str, Any]) -> str:
        if self.pretty:
            return textwrap.indent(
                json.dumps(obj, indent=2, ensure_ascii=False, allow_nan=False),
                "  ",
            )
        return json.dumps(
            obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )

    def format(self, result: ResultSet) -> Iterator[str]:
        names = result.column_names
        separator = ",\n" if self.pretty else ","
        empty = True

        for index, row in iter_rows(result):
            if empty:
                yield "[\n" if self.pretty else "["
                empty = False
            else:
                yield separator
            yield self._dump(_row_object(names, row, index))

        if empty:
            yield "[]\n"
        else:
            yield "\n]\n" if self.pretty else "]\n"


registry.register("json", JSONFormatter)
