"""Query source resolution for gold-digger.

Resolves the SQL query text from one of four sources:
1. Inline (-q/--query), highest priority
2. File path (--query-file)
3. DATABASE_QUERY env var
4. Piped stdin, lowest priority
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from gold_digger.core.exceptions import ConfigError, InputError

QUERY_ENV_VAR = "DATABASE_QUERY"


def _stdin_is_piped() -> bool:
    try:
        return not sys.stdin.isatty()
    except (ValueError, AttributeError):
        return False


def resolve_query_source(
    inline: str | None,
    file_path: str | Path | None,
) -> str:
    """Resolve SQL query from inline, file, env, or stdin.

    Precedence: inline > file > env > stdin.
    Raises ConfigError when both inline and file are given or no source
    is available, InputError when the file cannot be read.
    """
    if inline is not None and file_path is not None:
        msg = "--query and --query-file are mutually exclusive"
        raise ConfigError(msg)

    if inline is not None:
        return inline

    if file_path is not None:
        p = Path(file_path)
        if not p.is_file():
            msg = (
                f"Query file not found: {file_path}\n"
                "Use --query for inline queries or pipe query via stdin."
            )
            raise InputError(msg)
        try:
            return p.read_text()
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read query file {file_path}: {e}"
            raise InputError(msg) from e

    env_query = os.environ.get(QUERY_ENV_VAR)
    if env_query:
        return env_query

    if _stdin_is_piped():
        sql = sys.stdin.read()
        if sql.strip():
            return sql

    msg = f"No query provided. Use --query, --query-file, {QUERY_ENV_VAR}, or pipe to stdin."
    raise ConfigError(msg)
