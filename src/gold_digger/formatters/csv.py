"""CSV formatter for ResultSet output (RFC 4180 quoting, LF line endings)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from gold_digger.core.values import to_csv_field
from gold_digger.formatters.base import iter_rows, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gold_digger.core.models import ResultSet

LINE_TERMINATOR = "\n"


def _write_row(values: list[str]) -> str:
    # QUOTE_MINIMAL only guarantees quoting for lineterminator characters,
    # and a bare CR must be quoted too.
    quoting = (
        csv.QUOTE_ALL if any("\r" in v for v in values) else csv.QUOTE_MINIMAL
    )
    buf = StringIO()
    writer = csv.writer(buf, lineterminator=LINE_TERMINATOR, quoting=quoting)
    writer.writerow(values)
    return buf.getvalue()


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: ResultSet) -> Iterator[str]:
        # A zero-column result set has nothing to put on a line.
        has_columns = bool(result.columns)

        if has_columns and not self.no_header:
            yield _write_row(result.column_names)

        for _, row in iter_rows(result):
            if has_columns:
                yield _write_row([to_csv_field(v) for v in row])


registry.register("csv", CSVFormatter)
