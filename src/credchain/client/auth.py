"""``httpx`` authentication flow backed by a credential helper chain.

:class:`CredentialHelperAuth` plugs the helper chain into
:class:`httpx.Client` / :class:`httpx.AsyncClient`:

1. Before sending, it fills credentials for the request URL and adds an
   ``Authorization: Basic`` header, unless the request already has one.
2. A response below 300 approves the credentials, so the cache and the
   system credential store keep them.
3. A ``401 Unauthorized`` rejects them and, while retries remain, fills again
   and resends the request.

With :class:`httpx.AsyncClient` the helpers run in a worker thread, so
prompt programs and ``git credential`` never block the event loop.

Approve and reject failures are reported as warnings; they never turn a
successful HTTP exchange into an error. Fill failures propagate to the
caller as :class:`~credchain.exceptions.CredentialFillError`.

Example::

    import httpx
    from credchain.client import CredentialHelperAuth
    from credchain.context import CredentialHelperContext

    auth = CredentialHelperAuth(CredentialHelperContext.from_config())
    with httpx.Client(auth=auth) as client:
        client.get("https://git.example.com/info/lfs/locks")
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import AsyncGenerator, Callable, Generator, Optional

import httpx

from credchain.context import CredentialHelperContext, credential_query
from credchain.creds import PASSWORD, USERNAME, Creds
from credchain.exceptions import CredchainError
from credchain.helpers.base import CredentialHelper, HelperNoOp
from credchain.helpers.null import NULL_CREDENTIAL_HELPER

logger = logging.getLogger(__name__)


def basic_auth_header(creds: Creds) -> str:
    """Return the ``Authorization`` header value for *creds* per :rfc:`7617`."""
    raw = f"{creds.get(USERNAME, '')}:{creds.get(PASSWORD, '')}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class CredentialHelperAuth(httpx.Auth):
    """Authenticate requests with credentials from a helper chain.

    Args:
        context: Selects helpers per URL. When ``None``, the null helper is
            used and filling always fails with "No credential helper
            configured".
        helper: Optional helper passed to
            :meth:`~credchain.context.CredentialHelperContext.get_credential_helper`;
            bypasses chain construction.
        max_retries: How many times a ``401`` response triggers a fresh fill
            and resend.
    """

    requires_request_body = True

    def __init__(
        self,
        context: Optional[CredentialHelperContext] = None,
        helper: Optional[CredentialHelper] = None,
        max_retries: int = 1,
    ) -> None:
        self._context = context
        self._helper = helper
        self._max_retries = max_retries

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if "Authorization" in request.headers:
            yield request
            return

        helper, query = self._get_helper(str(request.url))
        retries = self._max_retries
        while True:
            creds = self._fill(helper, query)
            if creds is not None:
                request.headers["Authorization"] = basic_auth_header(creds)

            response = yield request

            if creds is None or not self._settle(helper, creds, response):
                return
            if retries <= 0:
                return
            retries -= 1
            del request.headers["Authorization"]

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        """Async variant of :meth:`auth_flow`.

        Helpers block on external programs, so every fill, approve and
        reject runs in a worker thread via :func:`asyncio.to_thread`.
        """
        if self.requires_request_body:
            await request.aread()

        if "Authorization" in request.headers:
            yield request
            return

        helper, query = self._get_helper(str(request.url))
        retries = self._max_retries
        while True:
            creds = await asyncio.to_thread(self._fill, helper, query)
            if creds is not None:
                request.headers["Authorization"] = basic_auth_header(creds)

            response = yield request

            if creds is None:
                return
            if not await asyncio.to_thread(self._settle, helper, creds, response):
                return
            if retries <= 0:
                return
            retries -= 1
            del request.headers["Authorization"]

    def _get_helper(self, url: str) -> tuple[CredentialHelper, Creds]:
        if self._context is None:
            helper = self._helper or NULL_CREDENTIAL_HELPER
            return helper, credential_query(url)
        return self._context.get_credential_helper(self._helper, url)

    @staticmethod
    def _fill(helper: CredentialHelper, query: Creds) -> Optional[Creds]:
        try:
            result = helper.fill(query)
        except HelperNoOp:
            return None
        if not result or not (result.get(USERNAME) or result.get(PASSWORD)):
            return None
        # Helpers may answer with only the secret fields.
        creds = Creds(query)
        creds.update(result)
        return creds

    def _settle(self, helper: CredentialHelper, creds: Creds, response: httpx.Response) -> bool:
        """Report the outcome of *response*; return whether it was a 401."""
        if response.status_code < 300:
            self._report(helper.approve, creds, "approve")
            return False
        if response.status_code != 401:
            return False
        self._report(helper.reject, creds, "reject")
        return True

    @staticmethod
    def _report(operation: Callable[[Creds], None], creds: Creds, name: str) -> None:
        try:
            operation(creds)
        except HelperNoOp:
            pass
        except CredchainError as exc:
            logger.warning("credential %s failed: %s", name, exc)
