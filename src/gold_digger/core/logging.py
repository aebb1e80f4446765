"""Logging configuration using structlog.

Logs go to stderr so that ``-o -`` can stream the document on stdout.
"""

import logging
import sys
from typing import Any

import structlog


class _LazyStderrFactory:
    """Resolve sys.stderr at logger creation time, not at configure() time.

    PrintLoggerFactory(file=sys.stderr) captures the file handle once.
    Under CliRunner tests the captured handle becomes stale when stderr
    is closed between invocations.  This factory defers the lookup so
    each logger gets the *current* sys.stderr.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def resolve_log_level(verbosity: int = 0, quiet: bool = False) -> int:
    """Map ``-v`` count and ``--quiet`` to a stdlib log level.

    quiet: errors only. Default: warnings. ``-v``: info. ``-vv``: debug.
    """
    if quiet:
        return logging.ERROR
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int = 0, quiet: bool = False) -> None:
    """Configure structlog for gold-digger.

    Args:
        verbosity: Number of ``-v`` flags given.
        quiet: If True, only errors are logged.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            resolve_log_level(verbosity, quiet)
        ),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, optionally bound with a name.

    IMPORTANT: Never call this at module level. Always call inside
    functions or __init__() after setup_logging() has been called.
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
