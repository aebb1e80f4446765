"""Shared test fixtures for gold-digger."""

import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from gold_digger.cli.main import app

_ISOLATED_ENV_VARS = (
    "DATABASE_URL",
    "DATABASE_QUERY",
    "OUTPUT_FILE",
    "GOLD_DIGGER_PROFILE",
    "GOLD_DIGGER_SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep the developer's environment and config file out of tests."""
    for var in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "gold_digger.core.config.DEFAULT_CONFIG_PATH",
        tmp_path / "no-such-config.toml",
    )


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mysql_url():
    """Connection URL of a real server; integration tests skip without it."""
    url = os.environ.get("GOLD_DIGGER_TEST_DATABASE_URL")
    if not url:
        pytest.skip("GOLD_DIGGER_TEST_DATABASE_URL not set")
    return url
