"""Credential helper selection for a target URL.

:class:`CredentialHelperContext` is built once per invocation from the
settings and the process environment. For each URL it returns the helper to
use and the initial query record to fill.

Helper order, when the caller does not supply its own helper:

1. :class:`~credchain.helpers.cache.CredentialCacher` -- unless
   ``cache_credentials`` is off.
2. :class:`~credchain.helpers.askpass.AskPassCredentialHelper` -- only if an
   askpass program was found and no explicit ``helper`` is configured for
   the URL.
3. :class:`~credchain.helpers.command.CommandCredentialHelper` -- always.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional
from urllib.parse import unquote, urlsplit

from credchain.config import (
    allow_terminal_prompt,
    resolve_settings,
    url_config_bool,
    url_config_get,
)
from credchain.creds import PATH, USERNAME, Creds
from credchain.helpers.askpass import AskPassCredentialHelper
from credchain.helpers.base import CredentialHelper
from credchain.helpers.cache import CredentialCacher
from credchain.helpers.chain import CredentialHelpers
from credchain.helpers.command import CommandCredentialHelper
from credchain.models import Settings


def _raw_url(url: str) -> str:
    """Return *url* reduced to ``scheme://host[:port]/path``."""
    parts = urlsplit(url)
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}{parts.path}"


def credential_query(url: str, use_http_path: bool = False) -> Creds:
    """Build the initial lookup record for *url*.

    Args:
        url: The target URL, optionally carrying ``user@`` information.
        use_http_path: Include the path (without its leading slash).

    Returns:
        A record with ``protocol`` and ``host``, plus ``username`` when the
        URL names a user and ``path`` when requested.
    """
    parts = urlsplit(url)
    query = Creds(protocol=parts.scheme, host=parts.netloc.rpartition("@")[2])
    if parts.username:
        query[USERNAME] = unquote(parts.username)
    if use_http_path:
        query[PATH] = parts.path.lstrip("/")
    return query


def find_askpass(settings: Settings, environ: Mapping[str, str]) -> str:
    """Return the askpass program, or ``""`` when none is configured.

    Checked in order: ``GIT_ASKPASS``, ``settings.askpass``, ``SSH_ASKPASS``.
    The first one that is set wins, even if it is empty.
    """
    if "GIT_ASKPASS" in environ:
        return environ["GIT_ASKPASS"]
    if settings.askpass is not None:
        return settings.askpass
    return environ.get("SSH_ASKPASS", "")


class CredentialHelperContext:
    """Holds the helpers shared by every chain built for one invocation.

    Args:
        settings: The effective settings.
        environ: Environment to read ``GIT_ASKPASS``, ``SSH_ASKPASS`` and
            ``GIT_TERMINAL_PROMPT`` from. Defaults to ``os.environ``.

    Raises:
        ConfigError: If ``GIT_TERMINAL_PROMPT`` is not a valid boolean.
    """

    def __init__(
        self,
        settings: Settings,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        if environ is None:
            environ = os.environ
        self.settings = settings

        self.askpass_helper: Optional[AskPassCredentialHelper] = None
        askpass = find_askpass(settings, environ)
        if askpass:
            self.askpass_helper = AskPassCredentialHelper(askpass)

        self.caching_helper: Optional[CredentialCacher] = None
        if settings.cache_credentials:
            self.caching_helper = CredentialCacher()

        self.command_helper = CommandCredentialHelper(
            skip_prompt=not allow_terminal_prompt(environ),
        )

    @classmethod
    def from_config(cls, environ: Optional[Mapping[str, str]] = None) -> "CredentialHelperContext":
        """Build a context from :func:`~credchain.config.resolve_settings`."""
        return cls(resolve_settings(), environ)

    def get_credential_helper(
        self,
        helper: Optional[CredentialHelper],
        url: str,
    ) -> tuple[CredentialHelper, Creds]:
        """Return the helper to use for *url* and the query to fill.

        Args:
            helper: A caller-supplied helper. When given it is returned as
                is and no chain is built.
            url: The target URL.

        Returns:
            A ``(helper, query)`` tuple. The query always holds ``protocol``
            and ``host``, plus ``username`` if the URL has one and ``path`` if
            ``use_http_path`` is on for the URL.
        """
        rawurl = _raw_url(url)
        query = credential_query(
            url,
            use_http_path=url_config_bool(self.settings, rawurl, "use_http_path", False),
        )

        if helper is not None:
            return helper, query

        helpers: list[CredentialHelper] = []
        if self.caching_helper is not None:
            helpers.append(self.caching_helper)
        if self.askpass_helper is not None:
            if not url_config_get(self.settings, rawurl, "helper"):
                helpers.append(self.askpass_helper)
        helpers.append(self.command_helper)

        return CredentialHelpers(helpers), query
