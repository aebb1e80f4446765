"""Standard exit codes for gold-digger.

The numbering is part of the tool's public contract: scripts that wrap
gold-digger branch on these values.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for gold-digger runs."""

    SUCCESS = 0
    NO_ROWS = 1
    CONFIG_ERROR = 2
    DB_AUTH_ERROR = 3
    QUERY_ERROR = 4
    IO_ERROR = 5
