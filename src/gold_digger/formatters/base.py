"""Formatter protocol and registry for output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from gold_digger.core.exceptions import ColumnCountMismatchError, UnsupportedFormatError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gold_digger.core.models import ResultSet, Row


@runtime_checkable
class Formatter(Protocol):
    """Protocol for output formatters.

    Each formatter transforms a ResultSet into chunks of document text.
    Concatenating every chunk yields one complete document. Rows are read
    in a single forward pass, so a lazy row iterator is enough.
    """

    def format(self, result: ResultSet) -> Iterator[str]:
        """Transform a ResultSet into formatted output chunks."""
        ...


def iter_rows(result: ResultSet) -> Iterator[tuple[int, Row]]:
    """Yield ``(index, row)`` pairs, rejecting rows of the wrong width."""
    width = len(result.columns)
    for index, row in enumerate(result.rows):
        if len(row) != width:
            msg = (
                f"Row {index} has {len(row)} values but the result set "
                f"has {width} columns"
            )
            raise ColumnCountMismatchError(msg)
        yield index, row


class FormatterRegistry:
    """Registry for looking up formatters by name."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Return a formatter instance by name.

        Raises UnsupportedFormatError if the format name is not registered.
        """
        if name not in self._formatters:
            available = ", ".join(sorted(self._formatters))
            msg = f"Unknown format {name!r}. Available: {available}"
            raise UnsupportedFormatError(msg)
        return self._formatters[name](**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


# Global registry instance populated by formatter modules.
registry = FormatterRegistry()
