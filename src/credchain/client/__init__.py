"""HTTP client integration for credchain.

Provides :class:`CredentialHelperAuth`, an :class:`httpx.Auth` flow that
fills request credentials from a helper chain and reports the outcome back
through approve or reject.

Example::

    from credchain.client import CredentialHelperAuth

    with httpx.Client(auth=CredentialHelperAuth(context)) as client:
        resp = client.get("https://git.example.com/info/lfs")
"""

from credchain.client.auth import CredentialHelperAuth, basic_auth_header

__all__ = ["CredentialHelperAuth", "basic_auth_header"]
