"""Fallback chain of credential helpers.

:class:`CredentialHelpers` presents an ordered list of helpers as a single
:class:`~credchain.helpers.base.CredentialHelper`:

- **fill** -- the first helper to return a record wins. A helper that raises
  anything other than :class:`~credchain.helpers.base.HelperNoOp` is skipped
  for every later call on this chain, and its message is kept for the
  aggregate :class:`~credchain.exceptions.CredentialFillError`.
- **reject** -- the first helper that does not abstain decides the outcome.
- **approve** -- the first helper that does not abstain decides the outcome.
  If it fails, the earlier helpers (typically the in-memory cache, which
  stored the record and abstained) are told to reject it again, because the
  authoritative store never saved it.

A chain is meant to live for one logical operation, usually one process.
Its skip set is never shared between chains.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

from credchain.creds import Creds
from credchain.exceptions import CredentialFillError, NoCredentialHelpersError
from credchain.helpers.base import CredentialHelper, HelperNoOp

logger = logging.getLogger(__name__)


class CredentialHelpers(CredentialHelper):
    """Iterate through credential helpers until one of them answers.

    Args:
        helpers: The helpers in priority order. The sequence is copied and
            fixed for the lifetime of the chain.

    Example::

        chain = CredentialHelpers([CredentialCacher(), CommandCredentialHelper()])
        creds = chain.fill(Creds(protocol="https", host="git.example.com"))
    """

    def __init__(self, helpers: Sequence[CredentialHelper]) -> None:
        self._helpers: tuple[CredentialHelper, ...] = tuple(helpers)
        self._skipped_helpers: set[int] = set()
        self._lock = threading.Lock()

    @property
    def helpers(self) -> tuple[CredentialHelper, ...]:
        """The helpers in the order they are consulted."""
        return self._helpers

    def fill(self, query: Creds) -> Optional[Creds]:
        """Ask each helper in order to fill *query*.

        Returns:
            The first record a helper produced, or ``None`` when every helper
            abstained or had nothing, and none of them failed.

        Raises:
            CredentialFillError: If no helper produced a record and at least
                one of them failed.
        """
        errors: list[str] = []
        for i, helper in enumerate(self._helpers):
            if self.skipped(i):
                continue

            try:
                creds = helper.fill(query)
            except HelperNoOp:
                continue
            except Exception as exc:
                self.skip(i)
                logger.debug("credential fill error: %s", exc)
                errors.append(str(exc))
                continue

            if creds is not None:
                return creds

        if errors:
            raise CredentialFillError(errors)
        return None

    def reject(self, creds: Creds) -> None:
        """Reject *creds* with the first helper that does not abstain.

        Raises:
            NoCredentialHelpersError: If every helper abstained.
        """
        for i, helper in enumerate(self._helpers):
            if self.skipped(i):
                continue
            try:
                helper.reject(creds)
            except HelperNoOp:
                continue
            return

        raise NoCredentialHelpersError("no valid credential helpers to reject")

    def approve(self, creds: Creds) -> None:
        """Approve *creds* with the first helper that does not abstain.

        If that helper fails, every earlier helper that is still active is
        asked to reject *creds* before the error propagates. Failures during
        that rollback are logged and discarded.

        Raises:
            NoCredentialHelpersError: If every helper abstained.
        """
        consulted: list[int] = []
        for i, helper in enumerate(self._helpers):
            if self.skipped(i):
                continue
            try:
                helper.approve(creds)
            except HelperNoOp:
                consulted.append(i)
                continue
            except Exception:
                if consulted:
                    self._rollback(consulted, creds)
                raise
            return

        raise NoCredentialHelpersError("no valid credential helpers to approve")

    def _rollback(self, indices: list[int], creds: Creds) -> None:
        for j in indices:
            if self.skipped(j):
                continue
            try:
                self._helpers[j].reject(creds)
            except HelperNoOp:
                pass
            except Exception as exc:
                logger.debug("credential rollback error: %s", exc)

    def skip(self, i: int) -> None:
        """Stop consulting the helper at index *i* on this chain."""
        with self._lock:
            self._skipped_helpers.add(i)

    def skipped(self, i: int) -> bool:
        """Return whether the helper at index *i* has been skipped."""
        with self._lock:
            return i in self._skipped_helpers
