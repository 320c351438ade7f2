"""In-memory credential cache.

:class:`CredentialCacher` remembers credentials approved during the current
invocation, keyed by :func:`~credchain.creds.cred_cache_key`, so that a
second request to the same ``(protocol, host, path)`` does not prompt again
or spawn another helper process. Nothing is ever written to disk.

The cacher never claims an approval as its own: storing a record raises
:class:`~credchain.helpers.base.HelperNoOp` so that the chain still forwards
the approval to the persistent store behind it.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from credchain.creds import HOST, PATH, PROTOCOL, Creds, cred_cache_key
from credchain.helpers.base import CredentialHelper, HelperNoOp

logger = logging.getLogger(__name__)


class CredentialCacher(CredentialHelper):
    """Thread-safe in-memory store of approved credentials.

    Example::

        cacher = CredentialCacher()
        cacher.approve(creds)          # raises HelperNoOp, but stores creds
        assert cacher.fill(query) == creds
    """

    def __init__(self) -> None:
        self._creds: dict[str, Creds] = {}
        self._lock = threading.Lock()

    def fill(self, query: Creds) -> Optional[Creds]:
        """Return the cached record for *query*'s key.

        Raises:
            HelperNoOp: On a cache miss.
        """
        key = cred_cache_key(query)
        with self._lock:
            cached = self._creds.get(key)

        if cached is None:
            raise HelperNoOp()

        logger.debug(
            "creds: credential cache (%r, %r, %r)",
            query.get(PROTOCOL, ""),
            query.get(HOST, ""),
            query.get(PATH, ""),
        )
        return Creds(cached)

    def approve(self, creds: Creds) -> None:
        """Cache *creds* unless an entry for the same key already exists.

        The first approval for a key wins; a repeated approval leaves the
        stored record as it is.

        Raises:
            HelperNoOp: Always, so the approval still reaches the
                persistent store behind the cache.
        """
        key = cred_cache_key(creds)
        with self._lock:
            if key not in self._creds:
                self._creds[key] = Creds(creds)
        raise HelperNoOp()

    def reject(self, creds: Creds) -> None:
        """Forget any cached entry for *creds*' key.

        Raises:
            HelperNoOp: Always; rejection must still reach later helpers.
        """
        key = cred_cache_key(creds)
        with self._lock:
            self._creds.pop(key, None)
        raise HelperNoOp()

    def __len__(self) -> int:
        with self._lock:
            return len(self._creds)
