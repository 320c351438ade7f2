"""Typer application and CLI entry point for credchain.

This module wires together the top-level Typer application and registers the
built-in commands (``fill``, ``approve``, ``reject``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`credchain.commands.credential`: The credential commands.
    :mod:`credchain.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from credchain import __version__
from credchain.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="credchain",
    help="Resolve HTTP credentials through cache, askpass, and git-credential helpers.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from credchain.commands.config import config_app  # noqa: E402
from credchain.commands.credential import (  # noqa: E402
    approve_command,
    fill_command,
    reject_command,
)

app.command("fill")(fill_command)
app.command("approve")(approve_command)
app.command("reject")(reject_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"credchain {__version__}")
        raise typer.Exit()


_log_handler: Optional[logging.Handler] = None


def configure_logging(verbose: bool) -> None:
    """Route the ``credchain`` logger to stderr.

    With *verbose*, helper tracing (cache hits, helper invocations, skipped
    helpers) is shown at DEBUG level; otherwise only warnings are.
    """
    global _log_handler

    logger = logging.getLogger("credchain")
    if _log_handler is not None:
        logger.removeHandler(_log_handler)
    # Bind to the current sys.stderr; it may have been swapped since last time.
    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(_log_handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print credentials as a JSON object."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~credchain.output.OutputManager` and the
    ``credchain`` logger from CLI flags.

    Args:
        version: If ``True``, print the version string and exit.
        json_output: Print credential records as JSON instead of key=value.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output and helper tracing.
    """
    from credchain.output import OutputFormat, OutputManager, set_output

    output = OutputManager(
        format=OutputFormat.JSON if json_output else OutputFormat.PLAIN,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(verbose)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from credchain.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``credchain`` console script.

    Unhandled :class:`~credchain.exceptions.CredchainError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from credchain.exceptions import CredchainError
        from credchain.output import error

        if isinstance(exc, CredchainError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
