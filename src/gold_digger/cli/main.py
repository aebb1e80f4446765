"""gold-digger entry point and command registration."""

from __future__ import annotations

import click
import sentry_sdk
import typer

from gold_digger.cli.commands.export import export_command
from gold_digger.core.exceptions import GoldDiggerError
from gold_digger.core.exit_codes import ExitCode

app = typer.Typer(
    help="gold-digger - MySQL/MariaDB query tool that exports results to CSV, JSON, or TSV",
    no_args_is_help=False,
)

app.command("export")(export_command)


def run() -> None:
    """Entry point with global error handling.

    click runs outside standalone mode so that Ctrl-C reaches this handler
    instead of being turned into a generic exit 1.
    """
    try:
        exit_code = app(standalone_mode=False)
    except GoldDiggerError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except click.exceptions.Abort:
        raise SystemExit(130) from None
    except click.exceptions.ClickException as e:
        e.show()
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.QUERY_ERROR) from None

    # --version and --dump-config finish through typer.Exit, whose code is returned.
    if isinstance(exit_code, int) and exit_code != ExitCode.SUCCESS:
        raise SystemExit(exit_code)
