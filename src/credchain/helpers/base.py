"""Abstract base class for credential helpers.

This module defines the two foundational types of the helper subsystem:

- :class:`HelperNoOp` -- the signal a helper raises to say "I have no
  opinion, ask the next one".
- :class:`CredentialHelper` -- the abstract base class that every credential
  source extends.

Each operation has three kinds of outcome, and the difference matters to
:class:`~credchain.helpers.chain.CredentialHelpers`:

========================  ==============================================
Outcome                   Meaning
========================  ==============================================
return                    The helper handled the call. ``fill`` may
                          return ``None`` for "definitively nothing here".
``raise HelperNoOp``      Not applicable; try the next helper.
raise anything else       The helper is broken; the chain skips it for
                          the rest of its lifetime.
========================  ==============================================

See Also:
    :mod:`credchain.helpers.chain` for how the outcomes are combined.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from credchain.creds import Creds


class HelperNoOp(Exception):
    """Raised by a helper that declines to take part in an operation.

    Never surfaced to callers of a helper chain and never causes a helper to
    be skipped.
    """

    def __init__(self, message: str = "no-op!"):
        super().__init__(message)


class CredentialHelper(ABC):
    """Abstract base class for a source of credentials.

    Concrete helpers (in-memory cache, askpass program, ``git credential``,
    the null helper, and the chain itself) implement all three operations.
    Callers never inspect which concrete helper they hold.
    """

    @abstractmethod
    def fill(self, query: Creds) -> Optional[Creds]:
        """Complete the partial credential *query*.

        Args:
            query: Known attributes, at least ``protocol`` and ``host``.

        Returns:
            A completed record, or ``None`` when this helper definitively has
            no credentials for *query*.

        Raises:
            HelperNoOp: If this helper does not apply.
            CredentialHelperError: If the helper malfunctioned.
        """
        ...

    @abstractmethod
    def approve(self, creds: Creds) -> None:
        """Record that *creds* were used successfully.

        Raises:
            HelperNoOp: If this helper does not persist approvals.
            CredentialHelperError: If persisting the approval failed.
        """
        ...

    @abstractmethod
    def reject(self, creds: Creds) -> None:
        """Record that *creds* were invalid and should be forgotten.

        Raises:
            HelperNoOp: If this helper has no rejection semantics.
            CredentialHelperError: If recording the rejection failed.
        """
        ...
