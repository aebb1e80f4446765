"""Tab-delimited formatter for ResultSet output.

Fields are joined by a single tab with no quoting. Backslash, tab, LF and
CR inside a field are written as ``\\\\``, ``\\t``, ``\\n`` and ``\\r``,
the same convention MySQL uses for batch output. Lines end with LF.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gold_digger.core.values import escape_tab_text, to_tab_field
from gold_digger.formatters.base import iter_rows, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gold_digger.core.models import ResultSet

DELIMITER = "\t"
LINE_TERMINATOR = "\n"


class TabFormatter:
    def __init__(self, no_header: bool = False, escape: bool = True) -> None:
        self.no_header = no_header
        self.escape = escape

    def format(self, result: ResultSet) -> Iterator[str]:
        has_columns = bool(result.columns)

        if has_columns and not self.no_header:
            header = [escape_tab_text(n, escape=self.escape) for n in result.column_names]
            yield DELIMITER.join(header) + LINE_TERMINATOR

        for _, row in iter_rows(result):
            if has_columns:
                fields = [to_tab_field(v, escape=self.escape) for v in row]
                yield DELIMITER.join(fields) + LINE_TERMINATOR


registry.register("tsv", TabFormatter)
