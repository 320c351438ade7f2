"""Credential helpers and the chain that combines them.

This package provides the pluggable credential-source framework:

- :class:`CredentialHelper` -- abstract base class for every source.
- :class:`HelperNoOp` -- the "ask the next helper" signal.
- :class:`CredentialCacher` -- in-memory cache of approved credentials.
- :class:`AskPassCredentialHelper` -- prompts through an askpass program.
- :class:`CommandCredentialHelper` -- speaks the ``git credential`` protocol.
- :class:`NullCredentialHelper` -- used when nothing is configured.
- :class:`CredentialHelpers` -- the fallback chain.

Typical usage::

    from credchain.helpers import CredentialCacher, CredentialHelpers
    from credchain.helpers import CommandCredentialHelper

    chain = CredentialHelpers([CredentialCacher(), CommandCredentialHelper()])
    creds = chain.fill(query)
"""

from credchain.helpers.askpass import AskPassCredentialHelper
from credchain.helpers.base import CredentialHelper, HelperNoOp
from credchain.helpers.cache import CredentialCacher
from credchain.helpers.chain import CredentialHelpers
from credchain.helpers.command import CommandCredentialHelper
from credchain.helpers.null import NULL_CREDENTIAL_HELPER, NullCredentialHelper

__all__ = [
    "AskPassCredentialHelper",
    "CommandCredentialHelper",
    "CredentialCacher",
    "CredentialHelper",
    "CredentialHelpers",
    "HelperNoOp",
    "NULL_CREDENTIAL_HELPER",
    "NullCredentialHelper",
]
