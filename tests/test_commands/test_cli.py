"""End-to-end CLI tests for ``credchain`` using Typer's CliRunner.

The ``git credential`` program is replaced by a shell script so that no
real credential store is touched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from credchain import __version__
from credchain.app import app
from credchain.config import save_settings
from credchain.context import CredentialHelperContext
from credchain.models import CredentialSettings, Settings

URL = "https://git.example.com/org/repo.git"

RECORD = "protocol=https\nhost=git.example.com\nusername=alice\npassword=s3cret\n"


@pytest.fixture(autouse=True)
def _plain_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep diagnostics unwrapped so messages can be matched."""
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def git_credential(
    isolated_config: Path,
    make_script: Callable[[str, str], Path],
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[str], Path]:
    """Install a stand-in for ``git credential`` and return a rewriter.

    By default the script records stdin to ``<verb>.in`` and fills
    carol/pw. Call the returned function with a new ``fill`` body to
    change how it answers.
    """
    state = {"script": None}

    def install(fill_body: str = "printf 'username=carol\\npassword=pw\\n'") -> Path:
        state["script"] = make_script(
            "git-credential",
            f'cat > "{isolated_config}/$1.in"\n'
            f'if [ "$1" = fill ]; then\n{fill_body}\nfi',
        )
        return state["script"]

    def context() -> CredentialHelperContext:
        ctx = CredentialHelperContext.from_config()
        ctx.command_helper.command = (str(state["script"]),)
        return ctx

    install()
    monkeypatch.setattr("credchain.commands.credential._context", context)
    return install


@pytest.fixture
def askpass(make_script: Callable[[str, str], Path], monkeypatch: pytest.MonkeyPatch) -> Path:
    script = make_script(
        "askpass",
        'case "$1" in\n'
        '  Username*) echo alice ;;\n'
        '  Password*) echo s3cret ;;\n'
        "esac",
    )
    monkeypatch.setenv("GIT_ASKPASS", str(script))
    return script


def _lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if "=" in line]


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"credchain {__version__}" in result.output

    def test_help_lists_commands(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("fill", "approve", "reject", "config"):
            assert name in result.output


# ---------------------------------------------------------------------------
# fill
# ---------------------------------------------------------------------------


class TestFill:
    def test_from_git_credential(self, cli_runner, git_credential, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 0, result.output
        assert _lines(result.stdout) == [
            "host=git.example.com",
            "password=pw",
            "protocol=https",
            "username=carol",
        ]
        assert (isolated_config / "fill.in").read_text() == (
            "host=git.example.com\nprotocol=https\n"
        )

    def test_askpass_before_git_credential(
        self, cli_runner, git_credential, askpass, isolated_config: Path
    ) -> None:
        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 0, result.output
        assert "username=alice" in result.stdout
        assert "password=s3cret" in result.stdout
        assert not (isolated_config / "fill.in").exists()

    def test_configured_helper_skips_askpass(self, cli_runner, git_credential, askpass) -> None:
        save_settings(Settings(credential=CredentialSettings(helper="store")))

        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 0, result.output
        assert "username=carol" in result.stdout

    def test_use_http_path_sends_path(
        self, cli_runner, git_credential, isolated_config: Path
    ) -> None:
        save_settings(
            Settings(urls={"https://git.example.com": CredentialSettings(use_http_path=True)})
        )

        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 0, result.output
        assert "path=org/repo.git" in result.stdout
        assert "path=org/repo.git" in (isolated_config / "fill.in").read_text()

    def test_json_output(self, cli_runner, git_credential) -> None:
        result = cli_runner.invoke(app, ["--json", "fill", URL])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {
            "host": "git.example.com",
            "password": "pw",
            "protocol": "https",
            "username": "carol",
        }

    def test_json_flag_on_fill(self, cli_runner, git_credential) -> None:
        result = cli_runner.invoke(app, ["fill", URL, "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["username"] == "carol"

    def test_nothing_found(self, cli_runner, git_credential) -> None:
        git_credential("exit 128")

        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 3
        assert f"No credentials found for {URL}" in result.output

    def test_helper_failure_reports_all_errors(self, cli_runner, git_credential) -> None:
        script = git_credential("exit 1")

        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 3
        assert "credential fill errors" in result.output
        assert f"'{script} fill' error: exit status 1" in result.output

    def test_terminal_prompt_disabled(
        self, cli_runner, git_credential, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        git_credential("exit 128")
        monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")

        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 3
        assert "GIT_TERMINAL_PROMPT" in result.output

    def test_invalid_terminal_prompt_value(
        self, cli_runner, git_credential, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GIT_TERMINAL_PROMPT", "sometimes")

        result = cli_runner.invoke(app, ["fill", URL])

        assert result.exit_code == 1
        assert "Invalid boolean value for GIT_TERMINAL_PROMPT" in result.output


# ---------------------------------------------------------------------------
# approve / reject
# ---------------------------------------------------------------------------


class TestApproveReject:
    def test_approve_reaches_git_credential(
        self, cli_runner, git_credential, isolated_config: Path
    ) -> None:
        result = cli_runner.invoke(app, ["approve"], input=RECORD)

        assert result.exit_code == 0, result.output
        assert "Credential approved for https://git.example.com" in result.output
        sent = (isolated_config / "approve.in").read_text().splitlines()
        assert "password=s3cret" in sent

    def test_reject_reaches_git_credential(
        self, cli_runner, git_credential, isolated_config: Path
    ) -> None:
        result = cli_runner.invoke(app, ["reject"], input=RECORD)

        assert result.exit_code == 0, result.output
        assert "Credential rejected for https://git.example.com" in result.output
        assert (isolated_config / "reject.in").exists()

    def test_quiet_suppresses_confirmation(self, cli_runner, git_credential) -> None:
        result = cli_runner.invoke(app, ["--quiet", "approve"], input=RECORD)

        assert result.exit_code == 0
        assert "approved" not in result.output

    def test_missing_host_is_usage_error(self, cli_runner, git_credential) -> None:
        result = cli_runner.invoke(app, ["approve"], input="protocol=https\n")

        assert result.exit_code == 2
        assert "missing required field(s): host" in result.output

    def test_helper_failure(self, cli_runner, git_credential, make_script) -> None:
        # Fail on every verb, not just fill.
        make_script("git-credential", "cat >/dev/null\nexit 5")

        result = cli_runner.invoke(app, ["reject"], input=RECORD)

        assert result.exit_code == 3
        assert "reject' error: exit status 5" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_path(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert str(isolated_config / "config" / "credchain" / "config.json") in result.stdout

    def test_show_defaults(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["cache_credentials"] is True
        assert data["askpass"] is None

    def test_show_layers_project_file(self, cli_runner, isolated_config: Path) -> None:
        save_settings(Settings(askpass="/global/ask"))
        (isolated_config / "credchain.json").write_text('{"askpass": "/project/ask"}')

        result = cli_runner.invoke(app, ["config", "show"])

        assert json.loads(result.stdout)["askpass"] == "/project/ask"

    def test_show_invalid_file(self, cli_runner, isolated_config: Path) -> None:
        (isolated_config / "credchain.json").write_text("[1, 2]")

        result = cli_runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "expected a JSON object" in result.output
