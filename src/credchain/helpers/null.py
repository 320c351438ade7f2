"""The helper used when no credential source is configured at all."""

from __future__ import annotations

from typing import Optional

from credchain.creds import Creds
from credchain.exceptions import CredentialHelperError
from credchain.helpers.base import CredentialHelper

NULL_CRED_ERROR_MESSAGE = "No credential helper configured"


class NullCredentialHelper(CredentialHelper):
    """Refuses to fill anything; accepts approvals and rejections silently."""

    def fill(self, query: Creds) -> Optional[Creds]:
        raise CredentialHelperError(NULL_CRED_ERROR_MESSAGE)

    def approve(self, creds: Creds) -> None:
        return None

    def reject(self, creds: Creds) -> None:
        return None


NULL_CREDENTIAL_HELPER = NullCredentialHelper()
