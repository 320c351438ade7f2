"""Credential commands -- fill, approve, and reject through the helper chain.

These commands expose :class:`~credchain.helpers.chain.CredentialHelpers` on
the command line, speaking the same ``key=value`` line format as
``git credential``:

    $ credchain fill https://git.example.com/repo
    host=git.example.com
    password=s3cret
    protocol=https
    username=alice

    $ printf 'protocol=https\\nhost=git.example.com\\nusername=alice\\npassword=s3cret\\n' \\
        | credchain approve

Failures exit with :data:`~credchain.exit_codes.EXIT_AUTH_FAILURE`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from credchain.creds import HOST, PATH, PROTOCOL, Creds, parse_creds
from credchain.exceptions import CredchainError, InvalidUsageError
from credchain.exit_codes import EXIT_AUTH_FAILURE
from credchain.output import OutputFormat, debug, error, print_record, success

if TYPE_CHECKING:
    from credchain.context import CredentialHelperContext


def _context() -> CredentialHelperContext:
    from credchain.context import CredentialHelperContext

    return CredentialHelperContext.from_config()


def _read_record() -> Creds:
    """Read a credential record from stdin and check it names a target."""
    stdin = typer.get_text_stream("stdin")
    creds = parse_creds(stdin.read())
    missing = [key for key in (PROTOCOL, HOST) if not creds.get(key)]
    if missing:
        raise InvalidUsageError(
            f"Credential input is missing required field(s): {', '.join(missing)}"
        )
    return creds


def _record_url(creds: Creds) -> str:
    url = f"{creds[PROTOCOL]}://{creds[HOST]}"
    if creds.get(PATH):
        url += "/" + creds[PATH]
    return url


def fill_command(
    url: str = typer.Argument(help="Target URL, e.g. https://git.example.com/repo."),
    json_output: bool = typer.Option(False, "--json", help="Print the record as a JSON object."),
) -> None:
    """Fill credentials for URL and print them as key=value lines.

    Helpers are consulted in order (memory cache, askpass program,
    ``git credential``); the first one that answers wins.

    Raises:
        typer.Exit: With code 3 if no helper produced credentials.
    """
    try:
        helper, query = _context().get_credential_helper(None, url)
        debug(f"Filling credentials for {query.get(PROTOCOL)}://{query.get(HOST)}")
        creds = helper.fill(query)
    except CredchainError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if creds is None:
        error(f"No credentials found for {url}")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)

    record = Creds(query)
    record.update(creds)
    print_record(record, OutputFormat.JSON if json_output else None)


def approve_command() -> None:
    """Approve the credential read from stdin.

    The record is stored in every helper that persists approvals, up to and
    including the first one that accepts it.
    """
    _run("approve")


def reject_command() -> None:
    """Reject the credential read from stdin so helpers forget it."""
    _run("reject")


def _run(operation: str) -> None:
    try:
        creds = _read_record()
        helper, _ = _context().get_credential_helper(None, _record_url(creds))
        getattr(helper, operation)(creds)
    except CredchainError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Credential {operation}d for {_record_url(creds)}")
