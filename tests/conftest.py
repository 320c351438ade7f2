"""Shared test fixtures for credchain.

Provides reusable fixtures for isolating configuration and the process
environment, writing stand-in helper programs, managing output state, and
running CLI commands. These fixtures are discovered automatically by pytest.
"""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable

import pytest

from credchain.creds import Creds
from credchain.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches a reference to sys.stderr at creation time.
    When Typer's CliRunner redirects that stream during a test, the cached
    reference goes stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_git_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that change helper selection."""
    for var in ["GIT_ASKPASS", "SSH_ASKPASS", "GIT_TERMINAL_PROMPT"]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path
    so that tests never touch real user config, and changes the working
    directory to tmp_path so no project config is picked up.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("credchain.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Stand-in programs
# ---------------------------------------------------------------------------


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a factory that writes an executable ``/bin/sh`` script.

    Usage::

        helper = make_script("helper", 'echo "username=alice"')
        CommandCredentialHelper(command=[str(helper)])
    """

    def _make(name: str, body: str) -> Path:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@pytest.fixture
def query() -> Creds:
    """A typical lookup record without a username or password."""
    return Creds(protocol="https", host="git.example.com", path="org/repo.git")


@pytest.fixture
def filled(query: Creds) -> Creds:
    """The *query* record completed with a username and password."""
    creds = Creds(query)
    creds.update(username="alice", password="s3cret")
    return creds


# ---------------------------------------------------------------------------
# Output / CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager for the test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
