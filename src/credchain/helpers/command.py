"""``git credential`` protocol adapter.

:class:`CommandCredentialHelper` runs ``<command> <verb>`` (by default
``git credential fill|approve|reject``), writes the query as ``key=value``
lines to the process's stdin and, for ``fill``, parses the same format back
from its stdout.

The child's stderr is inherited, never piped. Git's credential-cache daemon
keeps the stderr it was started with open for as long as it runs, so a
caller that waited for stderr to reach EOF would hang until the daemon
exits. Diagnostics therefore go straight to the user's terminal.

Exit status conventions:

- ``0`` -- success.
- ``128`` on ``fill`` -- git declined to produce credentials; reported as
  ``None`` so the chain moves on.
- anything else -- :class:`~credchain.exceptions.CredentialHelperError`.

See Also:
    https://git-scm.com/docs/git-credential for the protocol.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Sequence

from credchain.creds import HOST, PATH, PROTOCOL, Creds, format_creds, parse_creds
from credchain.exceptions import CredentialHelperError
from credchain.helpers.base import CredentialHelper

logger = logging.getLogger(__name__)

DEFAULT_COMMAND: tuple[str, ...] = ("git", "credential")
"""The credential tool invoked when no other command is configured."""

EXIT_NO_CREDENTIALS = 128
"""Exit status ``git credential fill`` uses when no helper filled the request."""


class CommandCredentialHelper(CredentialHelper):
    """Fill, approve and reject credentials through an external command.

    Args:
        command: The program and leading arguments; the verb is appended.
        skip_prompt: When ``True``, terminal prompting is disabled and any
            non-zero exit becomes an error telling the user how to enable it.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        skip_prompt: bool = False,
    ) -> None:
        self.command = tuple(command)
        self.skip_prompt = skip_prompt

    def fill(self, query: Creds) -> Optional[Creds]:
        logger.debug(
            "creds: %s fill (%r, %r, %r)",
            self._name,
            query.get(PROTOCOL, ""),
            query.get(HOST, ""),
            query.get(PATH, ""),
        )
        return self._exec("fill", query)

    def approve(self, creds: Creds) -> None:
        logger.debug(
            "creds: %s approve (%r, %r, %r)",
            self._name,
            creds.get(PROTOCOL, ""),
            creds.get(HOST, ""),
            creds.get(PATH, ""),
        )
        self._exec("approve", creds)

    def reject(self, creds: Creds) -> None:
        self._exec("reject", creds)

    @property
    def _name(self) -> str:
        return " ".join(self.command)

    def _exec(self, verb: str, creds: Creds) -> Optional[Creds]:
        """Run ``<command> <verb>`` with *creds* on stdin.

        Returns:
            The parsed stdout, or ``None`` for exit status 128 on ``fill``.

        Raises:
            CredentialHelperError: If the process cannot be started or exits
                with any other non-zero status.
        """
        try:
            # stderr is inherited, never read.
            proc = subprocess.Popen(
                [*self.command, verb],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=None,
                encoding="utf-8",
            )
            output, _ = proc.communicate(input=format_creds(creds))
        except OSError as exc:
            raise CredentialHelperError(
                f"'{self._name} {verb}' error: {exc}"
            ) from exc

        status = proc.returncode
        if status != 0:
            if self.skip_prompt:
                raise CredentialHelperError(
                    "Change the GIT_TERMINAL_PROMPT env var to be prompted to "
                    "enter your credentials for "
                    f"{creds.get(PROTOCOL, '')}://{creds.get(HOST, '')}."
                )
            if verb == "fill" and status == EXIT_NO_CREDENTIALS:
                return None
            raise CredentialHelperError(
                f"'{self._name} {verb}' error: exit status {status}"
            )

        return parse_creds(output or "")
