"""``GIT_ASKPASS`` / ``core.askpass`` credential helper.

:class:`AskPassCredentialHelper` runs an interactive prompt program once for
each missing value, username first and then password. The program gets a
single argument such as ``Password for "https://alice@git.example.com/repo"``
and answers on stdout.

The helper only fills in what is missing. A username that arrived in the
request URL is reused without prompting. It never persists anything, so
approve and reject are no-ops.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional
from urllib.parse import quote

from credchain.creds import HOST, PASSWORD, PATH, PROTOCOL, USERNAME, Creds
from credchain.exceptions import CredentialHelperError
from credchain.helpers.base import CredentialHelper, HelperNoOp

logger = logging.getLogger(__name__)

_PROMPT_LABELS = {USERNAME: "Username", PASSWORD: "Password"}


class AskPassCredentialHelper(CredentialHelper):
    """Prompt for credentials by running an askpass program.

    Args:
        program: The executable's absolute or relative name.
    """

    def __init__(self, program: str) -> None:
        self.program = program

    def fill(self, query: Creds) -> Optional[Creds]:
        """Prompt for whichever of username and password *query* lacks.

        Args:
            query: The lookup input; ``protocol``, ``host`` and ``path`` are
                used to build the prompt text.

        Returns:
            A record holding ``username`` and ``password``.

        Raises:
            CredentialHelperError: If the program fails or writes to stderr.
        """
        creds = Creds()

        username = self._get_value(query, USERNAME, _prompt_url(query))
        creds[USERNAME] = username

        password = self._get_value(query, PASSWORD, _prompt_url(query, username))
        creds[PASSWORD] = password

        return creds

    def approve(self, creds: Creds) -> None:
        raise HelperNoOp()

    def reject(self, creds: Creds) -> None:
        raise HelperNoOp()

    def args(self, prompt: str) -> list[str]:
        """Return the program's arguments: the prompt, if there is one."""
        if not prompt:
            return []
        return [prompt]

    def _get_value(self, query: Creds, field: str, url: str) -> str:
        given = query.get(field)
        if given:
            return given
        return self._get_from_program(field, url)

    def _get_from_program(self, field: str, url: str) -> str:
        prompt = f'{_PROMPT_LABELS[field]} for "{url}"'
        cmd = [self.program, *self.args(prompt)]

        logger.debug("creds: filling with GIT_ASKPASS: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as exc:
            raise CredentialHelperError(str(exc)) from exc

        if result.returncode != 0:
            detail = result.stderr.strip() if result.stderr else ""
            message = f"exit status {result.returncode}"
            raise CredentialHelperError(f"{message}: {detail}" if detail else message)

        if result.stderr:
            raise CredentialHelperError(result.stderr)

        return result.stdout.strip()


def _prompt_url(query: Creds, username: str = "") -> str:
    """Build the URL shown in a prompt, optionally with *username* embedded."""
    userinfo = f"{quote(username, safe='')}@" if username else ""
    url = f"{query.get(PROTOCOL, '')}://{userinfo}{query.get(HOST, '')}"
    path = query.get(PATH, "")
    if path:
        url += "/" + path.lstrip("/")
    return url
