"""Sentry integration for error tracking and performance monitoring.

Sentry is initialized early in the CLI after logging setup, and only when
a DSN is configured through GOLD_DIGGER_SENTRY_DSN.
"""

import os

import sentry_sdk

from gold_digger.__about__ import __version__

SENTRY_DSN_ENV = "GOLD_DIGGER_SENTRY_DSN"


def setup_sentry(environment: str = "local") -> bool:
    """Initialize Sentry when a DSN is set. Returns whether it was enabled."""
    dsn = os.environ.get(SENTRY_DSN_ENV)
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
