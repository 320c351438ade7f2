"""The credential record and its ``key=value`` wire format.

A :class:`Creds` is an open mapping of string keys to string values. It is
deliberately not a fixed model: the ``git credential`` protocol grows new
attributes over time, and any key this package does not understand must be
carried through unchanged. Five keys carry meaning here:

- ``protocol`` -- URL scheme, e.g. ``"https"``.
- ``host`` -- host name, including the port when one was given.
- ``path`` -- URL path without its leading slash (only sent when configured).
- ``username`` / ``password`` -- the credential itself.

The same line format is used on both sides of the protocol: one
``key=value`` per line, split on the *first* ``=``.
"""

from __future__ import annotations

from typing import Iterable

CACHE_KEY_SEPARATOR = "//"

PROTOCOL = "protocol"
HOST = "host"
PATH = "path"
USERNAME = "username"
PASSWORD = "password"


class Creds(dict[str, str]):
    """A set of credential attributes passed to and from credential helpers.

    Behaves exactly like a ``dict``; the subclass only exists to give the
    record a name in signatures and a readable ``repr`` that never leaks a
    password into logs or tracebacks.

    Example::

        creds = Creds(protocol="https", host="git.example.com")
        creds["username"] = "alice"
    """

    def __repr__(self) -> str:
        shown = {k: ("<redacted>" if k == PASSWORD else v) for k, v in self.items()}
        return f"Creds({shown!r})"


def cred_cache_key(creds: Creds) -> str:
    """Return the in-memory cache key for *creds*.

    Only ``protocol``, ``host`` and ``path`` take part, so two records that
    differ in username or password map to the same key. Missing fields
    serialise as the empty string.

    Args:
        creds: Any credential record.

    Returns:
        The three fields joined with :data:`CACHE_KEY_SEPARATOR`.
    """
    parts = [creds.get(PROTOCOL, ""), creds.get(HOST, ""), creds.get(PATH, "")]
    return CACHE_KEY_SEPARATOR.join(parts)


def format_creds(creds: Creds) -> str:
    """Serialise *creds* as ``key=value`` lines for a helper's stdin.

    Keys are emitted in sorted order; the protocol is order-independent, so
    sorting only makes the output reproducible. Empty values are omitted.
    """
    lines = [f"{key}={value}\n" for key, value in sorted(creds.items()) if value]
    return "".join(lines)


def parse_creds(lines: str | Iterable[str]) -> Creds:
    """Parse ``key=value`` lines produced by a credential helper.

    Parsing is permissive: a line without ``=`` or with an empty value is
    dropped, and everything after the first ``=`` belongs to the value.

    Args:
        lines: Either the raw output text or an iterable of lines.

    Returns:
        The parsed record. Later duplicates of a key win.
    """
    if isinstance(lines, str):
        lines = lines.split("\n")

    creds = Creds()
    for line in lines:
        key, sep, value = line.rstrip("\r\n").partition("=")
        if not sep or not value:
            continue
        creds[key] = value
    return creds
