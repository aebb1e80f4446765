"""MySQL/MariaDB client for gold-digger.

Wraps PyMySQL connections with TLS options, query execution, and
exception mapping to the GoldDiggerError hierarchy.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import pymysql
import pymysql.cursors
import sentry_sdk
from pymysql.constants import FIELD_TYPE

from gold_digger.core.exceptions import (
    AuthenticationError,
    DatabaseConnectionError,
    QueryError,
)
from gold_digger.core.logging import get_logger
from gold_digger.core.models import ColumnMeta, ResultSet
from gold_digger.core.values import from_python

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from gold_digger.core.config import ResolvedConfig
    from gold_digger.core.models import Row

# Mapping from MySQL protocol type codes to human-readable names.
# Unknown codes fall back to "unknown".
_TYPE_NAMES: dict[int, str] = {
    FIELD_TYPE.DECIMAL: "decimal",
    FIELD_TYPE.TINY: "tinyint",
    FIELD_TYPE.SHORT: "smallint",
    FIELD_TYPE.LONG: "int",
    FIELD_TYPE.FLOAT: "float",
    FIELD_TYPE.DOUBLE: "double",
    FIELD_TYPE.NULL: "null",
    FIELD_TYPE.TIMESTAMP: "timestamp",
    FIELD_TYPE.LONGLONG: "bigint",
    FIELD_TYPE.INT24: "mediumint",
    FIELD_TYPE.DATE: "date",
    FIELD_TYPE.TIME: "time",
    FIELD_TYPE.DATETIME: "datetime",
    FIELD_TYPE.YEAR: "year",
    FIELD_TYPE.NEWDATE: "date",
    FIELD_TYPE.VARCHAR: "varchar",
    FIELD_TYPE.BIT: "bit",
    FIELD_TYPE.JSON: "json",
    FIELD_TYPE.NEWDECIMAL: "decimal",
    FIELD_TYPE.ENUM: "enum",
    FIELD_TYPE.SET: "set",
    FIELD_TYPE.TINY_BLOB: "tinyblob",
    FIELD_TYPE.MEDIUM_BLOB: "mediumblob",
    FIELD_TYPE.LONG_BLOB: "longblob",
    FIELD_TYPE.BLOB: "blob",
    FIELD_TYPE.VAR_STRING: "varchar",
    FIELD_TYPE.STRING: "char",
    FIELD_TYPE.GEOMETRY: "geometry",
}

# ER_DBACCESS_DENIED_ERROR, ER_ACCESS_DENIED_ERROR,
# ER_ACCESS_DENIED_NO_PASSWORD_ERROR
_AUTH_ERRNOS = frozenset({1044, 1045, 1698})


def _errno(exc: pymysql.MySQLError) -> int | None:
    if exc.args and isinstance(exc.args[0], int):
        return exc.args[0]
    return None


def _columns_from_description(description: Sequence[Sequence[Any]] | None) -> list[ColumnMeta]:
    if not description:
        return []
    return [
        ColumnMeta(
            name=desc[0],
            ordinal=i,
            type_code=desc[1],
            type_name=_TYPE_NAMES.get(desc[1], "unknown"),
        )
        for i, desc in enumerate(description)
    ]


def _convert_rows(raw_rows: Sequence[Sequence[Any]]) -> Iterator[Row]:
    for raw in raw_rows:
        yield tuple(from_python(v) for v in raw)


class MySqlClient:
    """Synchronous MySQL/MariaDB client using PyMySQL."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config
        self._connection: pymysql.connections.Connection[Any] | None = None

    def __enter__(self) -> MySqlClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _connect(self) -> pymysql.connections.Connection[Any]:
        if self._connection is not None and self._connection.open:
            return self._connection

        log = get_logger()
        tls = self.config.tls
        if tls.allow_invalid_certificate:
            log.warning("TLS certificate validation is disabled")

        log.info(
            "connecting to database",
            host=self.config.host,
            port=self.config.port,
            database=self.config.database,
            tls=tls.enabled,
        )
        try:
            self._connection = pymysql.connect(
                host=self.config.host,
                port=self.config.port,
                user=self.config.user,
                password=self.config.password or "",
                database=self.config.database,
                connect_timeout=self.config.connect_timeout,
                ssl=tls.to_ssl_options(),
                charset="utf8mb4",
                autocommit=True,
            )
        except pymysql.err.OperationalError as e:
            target = f"{self.config.host}:{self.config.port}"
            if _errno(e) in _AUTH_ERRNOS:
                msg = f"Authentication failed for user '{self.config.user}' at {target}: {e}"
                raise AuthenticationError(msg) from e
            msg = f"Connection failed to {target}: {e}"
            raise DatabaseConnectionError(msg) from e
        except pymysql.MySQLError as e:
            msg = f"Connection failed to {self.config.host}:{self.config.port}: {e}"
            raise DatabaseConnectionError(msg) from e

        return self._connection

    def execute_query(self, sql: str) -> ResultSet:
        """Execute SQL and return a ResultSet.

        The server result is fetched in full; rows are converted to Values
        lazily as the ResultSet is consumed.
        """
        log = get_logger()
        conn = self._connect()

        sql_normalized = " ".join(sql.split())
        span_description = sql_normalized[:100]
        log.debug("executing query", sql=sql_normalized)
        with sentry_sdk.start_span(op="db.query", description=span_description) as span:
            start_time = time.monotonic()
            try:
                with conn.cursor(pymysql.cursors.Cursor) as cur:
                    cur.execute(sql)
                    columns = _columns_from_description(cur.description)
                    raw_rows = cur.fetchall() if cur.description else ()
            except pymysql.err.OperationalError as e:
                span.set_status("unavailable")
                log.error("database error", sql=sql_normalized, error=str(e))
                if _errno(e) in _AUTH_ERRNOS:
                    raise AuthenticationError(f"Access denied: {e}") from e
                if conn.open:
                    raise QueryError(f"Query failed: {e}") from e
                raise DatabaseConnectionError(f"Connection lost: {e}") from e
            except pymysql.MySQLError as e:
                span.set_status("invalid_argument")
                log.error("query error", sql=sql_normalized, error=str(e))
                raise QueryError(f"SQL error: {e}") from e

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("row_count", len(raw_rows))
            span.set_data("duration_ms", duration_ms)
            log.debug(
                "query complete",
                duration_ms=f"{duration_ms:.1f}",
                row_count=len(raw_rows),
                column_count=len(columns),
            )

        return ResultSet(columns=columns, rows=_convert_rows(raw_rows))

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            if self._connection.open:
                self._connection.close()
            self._connection = None
