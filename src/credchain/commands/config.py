"""Config commands -- inspect credchain settings.

Provides the ``credchain config`` sub-command group::

    credchain config show   # effective settings as JSON
    credchain config path   # location of the settings file
"""

from __future__ import annotations

import json

import typer

from credchain.output import error, print_data

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Print the effective settings (user config layered with ./credchain.json)."""
    from credchain.config import resolve_settings
    from credchain.exceptions import ConfigError

    try:
        settings = resolve_settings()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_data(json.dumps(settings.model_dump(mode="json"), indent=2))


@config_app.command("path")
def config_path() -> None:
    """Print the path of the user settings file."""
    from credchain.config import settings_path

    print_data(str(settings_path()))
