"""Output formatting with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (``key=value`` credential lines or JSON).
  This is what a calling program reads, so nothing else may appear on it.
* **stderr** -- all diagnostics (status, errors, debug traces). Rendered with a
  Rich console unless colour is disabled.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- holds format preferences, the stderr console,
   and quiet/verbose flags. Created once in
   :func:`~credchain.app.main_callback` and installed via :func:`set_output`.
2. Module-level convenience functions (:func:`error`, :func:`success`,
   :func:`debug`, etc.) that delegate to the global ``OutputManager``.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Mapping, Optional

from rich.console import Console
from rich.markup import escape


class OutputFormat(str, Enum):
    """Enumeration of supported data formats on stdout."""

    PLAIN = "plain"
    JSON = "json"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        format: Format for data written to stdout.
        no_color: Disable all colour and Rich markup on stderr.
        quiet: Suppress success messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.PLAIN,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._format = format
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_record(
        self, record: Mapping[str, str], format: Optional[OutputFormat] = None
    ) -> None:
        """Print a credential record to stdout.

        * **Plain mode** -- ``key=value`` lines, sorted by key, the same
          format credential helpers read.
        * **JSON mode** -- a single JSON object.

        Args:
            record: The record to print.
            format: Overrides the active format for this call.
        """
        if (format or self._format) == OutputFormat.JSON:
            self.print_data(json.dumps(dict(record), indent=2, sort_keys=True))
            return
        for key, value in sorted(record.items()):
            self.print_data(f"{key}={value}")

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        """Print a green success message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, f"[green]{escape(message)}[/green]")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        self._emit(
            f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}"
        )

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown with ``--verbose``."""
        if self._verbose:
            self._emit(f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]")

    def _emit(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


def print_data(text: str) -> None:
    """Print raw data to stdout via the global OutputManager."""
    get_output().print_data(text)


def print_record(record: Mapping[str, str], format: Optional[OutputFormat] = None) -> None:
    """Print a credential record to stdout via the global OutputManager."""
    get_output().print_record(record, format)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
