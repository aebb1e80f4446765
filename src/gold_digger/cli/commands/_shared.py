"""Shared CLI plumbing for command modules.

Version flag handling, config resolution from CLI options, and client
creation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import typer

from gold_digger.__about__ import __version__
from gold_digger.core.client import MySqlClient
from gold_digger.core.config import load_config, resolve_config

if TYPE_CHECKING:
    from pathlib import Path

    from gold_digger.core.config import ResolvedConfig


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gold-digger {__version__}")
        raise typer.Exit()


def get_resolved_config(
    config_file: Path | None,
    profile: str | None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    config = load_config(config_file)
    overrides = {k: v for k, v in cli_overrides.items() if v is not None}
    return resolve_config(config, profile_name=profile, **overrides)


def get_client(resolved: ResolvedConfig) -> MySqlClient:
    return MySqlClient(resolved)
