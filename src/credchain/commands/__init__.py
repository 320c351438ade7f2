"""Built-in CLI commands for credchain.

Each module defines either plain command functions registered on the root
application or a Typer sub-application mounted by :mod:`credchain.app`:

- :mod:`~credchain.commands.credential` -- ``fill``, ``approve``, ``reject``.
- :mod:`~credchain.commands.config` -- ``config show``, ``config path``.
"""
