"""Query result models for gold-digger.

Pydantic models for representing the result set returned by
MySqlClient.execute_query().
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, SkipValidation

from gold_digger.core.values import Value, from_python

Row: TypeAlias = tuple[Value, ...]


class ColumnMeta(BaseModel):
    """Metadata for a single result column."""

    model_config = ConfigDict(frozen=True)

    name: str
    ordinal: int
    type_code: int | None = None
    type_name: str = "unknown"


class ResultSet(BaseModel):
    """Columns of one query plus the rows they govern.

    ``rows`` may be a list or a forward-only iterator; it is consumed once.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    columns: list[ColumnMeta]
    rows: SkipValidation[Iterable[Row]]

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    @classmethod
    def from_python(
        cls, column_names: Iterable[str], rows: Iterable[Iterable[Any]]
    ) -> ResultSet:
        """Build a materialized ResultSet from plain Python values."""
        columns = [
            ColumnMeta(name=name, ordinal=i) for i, name in enumerate(column_names)
        ]
        return cls(
            columns=columns,
            rows=[tuple(from_python(v) for v in row) for row in rows],
        )
