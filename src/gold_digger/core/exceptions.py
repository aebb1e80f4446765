"""Exception hierarchy for gold-digger.

All exceptions carry an exit_code for CLI return value mapping.
Exit codes are defined in exit_codes.py.
"""

from gold_digger.core.exit_codes import ExitCode


class GoldDiggerError(Exception):
    """Base exception for all gold-digger errors."""

    exit_code: int = ExitCode.QUERY_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(GoldDiggerError):
    """Malformed config, bad URL, conflicting flags, missing query."""

    exit_code: int = ExitCode.CONFIG_ERROR


class InputError(GoldDiggerError):
    """Query file missing or unreadable."""

    exit_code: int = ExitCode.IO_ERROR


class NoRowsError(GoldDiggerError):
    """Query returned no rows and empty output was not allowed."""

    exit_code: int = ExitCode.NO_ROWS


class DatabaseConnectionError(GoldDiggerError):
    """Server unreachable, TLS handshake failure, connection dropped."""

    exit_code: int = ExitCode.DB_AUTH_ERROR


class AuthenticationError(DatabaseConnectionError):
    """Access denied for the configured user."""


class QueryError(GoldDiggerError):
    """SQL syntax or execution failure."""

    exit_code: int = ExitCode.QUERY_ERROR


class SerializationError(GoldDiggerError):
    """A result set could not be written as a complete document."""

    exit_code: int = ExitCode.QUERY_ERROR


class UnsupportedFormatError(SerializationError):
    """Unknown output format selector."""

    exit_code: int = ExitCode.CONFIG_ERROR


class NonFiniteNumberError(SerializationError):
    """NaN or infinity targeted at a format with no literal for it."""


class ColumnCountMismatchError(SerializationError):
    """Row width disagrees with the column list."""


class EncodingHazardError(SerializationError):
    """Tab-delimited field holds a tab or line break and escaping is off."""


class SinkWriteError(SerializationError):
    """Writing the finished document to its destination failed."""

    exit_code: int = ExitCode.IO_ERROR
