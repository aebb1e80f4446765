"""Output format selection, serialization dispatch, and file commit."""

from __future__ import annotations

import contextlib
import os
import sys
import tempfile
from enum import StrEnum
from io import StringIO
from pathlib import Path
from typing import IO, TYPE_CHECKING


from gold_digger.core.exceptions import (
    NoRowsError,
    SinkWriteError,
    UnsupportedFormatError,
)
from gold_digger.core.logging import get_logger
from gold_digger.core.models import ResultSet

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from gold_digger.core.models import Row
    from gold_digger.formatters.base import Formatter

STDOUT_TARGET = "-"


class OutputFormat(StrEnum):
    CSV = "csv"
    JSON = "json"
    TSV = "tsv"


_EXTENSION_FORMATS: dict[str, OutputFormat] = {
    "csv": OutputFormat.CSV,
    "json": OutputFormat.JSON,
    "tsv": OutputFormat.TSV,
    "tab": OutputFormat.TSV,
    "txt": OutputFormat.TSV,
}


def resolve_format(format_flag: str | None, output_path: str | None = None) -> OutputFormat:
    """Determine the output format.

    Explicit --format overrides the output file extension. An unknown
    selector or extension is an error, never a silent default.
    """
    if format_flag is not None:
        try:
            return OutputFormat(format_flag.lower())
        except ValueError:
            available = ", ".join(f.value for f in OutputFormat)
            msg = f"Unknown format {format_flag!r}. Available: {available}"
            raise UnsupportedFormatError(msg) from None

    if output_path is None or output_path == STDOUT_TARGET:
        msg = "Cannot infer output format without an output file; use --format"
        raise UnsupportedFormatError(msg)

    extension = Path(output_path).suffix.lstrip(".").lower()
    if extension in _EXTENSION_FORMATS:
        return _EXTENSION_FORMATS[extension]

    known = ", ".join(f".{ext}" for ext in _EXTENSION_FORMATS)
    shown = f"'.{extension}'" if extension else "no extension"
    msg = f"Cannot infer output format from {output_path!r} ({shown}). Use one of {known} or pass --format"
    raise UnsupportedFormatError(msg)


def get_formatter(
    format_name: str,
    *,
    pretty: bool = False,
    no_header: bool = False,
    escape_tabs: bool = True,
) -> Formatter:
    """Build and return the appropriate formatter instance."""
    # Import here to trigger registry population from formatter modules.
    import gold_digger.formatters.csv  # noqa: F401
    import gold_digger.formatters.json  # noqa: F401
    import gold_digger.formatters.tab  # noqa: F401
    from gold_digger.formatters.base import registry

    kwargs: dict[str, object] = {}
    if format_name == OutputFormat.JSON:
        kwargs["pretty"] = pretty
    elif format_name == OutputFormat.CSV:
        kwargs["no_header"] = no_header
    elif format_name == OutputFormat.TSV:
        kwargs["no_header"] = no_header
        kwargs["escape"] = escape_tabs

    return registry.get(str(format_name), **kwargs)


class _CountingRows:
    """Single-pass row iterable that records how many rows went through."""

    def __init__(self, rows: Iterable[Row]) -> None:
        self._rows = rows
        self.count = 0

    def __iter__(self) -> Iterator[Row]:
        for row in self._rows:
            self.count += 1
            yield row


def serialize(
    result: ResultSet,
    format_name: str,
    sink: IO[str],
    *,
    pretty: bool = False,
    no_header: bool = False,
    escape_tabs: bool = True,
    allow_empty: bool = True,
) -> int:
    """Write ``result`` to ``sink`` as one complete document.

    The document is built in memory and written in a single call once the
    formatter has finished, so a serialization error leaves the sink
    untouched. With ``allow_empty=False`` a result without rows raises
    NoRowsError before anything is written. Returns the number of rows.
    """
    log = get_logger()
    formatter = get_formatter(
        format_name, pretty=pretty, no_header=no_header, escape_tabs=escape_tabs
    )
    counted = _CountingRows(result.rows)
    buf = StringIO()
    for chunk in formatter.format(ResultSet(columns=result.columns, rows=counted)):
        buf.write(chunk)

    if counted.count == 0 and not allow_empty:
        raise NoRowsError("No records found in database")

    try:
        sink.write(buf.getvalue())
        sink.flush()
    except OSError as e:
        msg = f"Failed to write output: {e}"
        raise SinkWriteError(msg) from e

    log.debug("document written", format=str(format_name), row_count=counted.count)
    return counted.count


@contextlib.contextmanager
def atomic_output(target: str | os.PathLike[str]) -> Iterator[IO[str]]:
    """Yield a text sink that replaces ``target`` only on success.

    Writes go to a temporary file in the target directory, renamed over
    the target when the block exits cleanly and removed otherwise.
    ``-`` yields stdout.
    """
    if str(target) == STDOUT_TARGET:
        yield sys.stdout
        return

    path = Path(target)
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
    except OSError as e:
        msg = f"Cannot create output file in {path.parent}: {e}"
        raise SinkWriteError(msg) from e

    tmp_path = Path(tmp_name)
    try:
        with open(fd, "w", encoding="utf-8", newline="") as sink:
            # mkstemp creates the file 0600; give it the usual umask mode.
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp_path, 0o666 & ~umask)
            yield sink
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        msg = f"Failed to write output file {path}: {e}"
        raise SinkWriteError(msg) from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
