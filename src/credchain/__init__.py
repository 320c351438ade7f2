"""credchain -- Resolve HTTP credentials through a chain of credential helpers.

This package answers one question for an HTTP client: *which username and
password should this request use?*  It consults, in priority order, an
in-memory cache of credentials already approved during this invocation, an
``askpass`` program that prompts the user, and finally the ``git credential``
protocol, which fronts whatever system credential store is configured.

Once the caller knows whether the credential worked, it reports back through
``approve`` or ``reject`` so that the cache and the persistent store stay
consistent with what was actually used.

Typical workflow::

    from credchain.context import CredentialHelperContext

    ctx = CredentialHelperContext.from_config()
    helper, query = ctx.get_credential_helper(None, "https://git.example.com/repo")
    creds = helper.fill(query)
    ...
    helper.approve(creds)

Modules:
    creds: The ``Creds`` record, its cache key, and the key=value line codec.
    helpers: The ``CredentialHelper`` contract and its implementations.
    context: Source selection and lookup-key construction for a URL.
    client: An :mod:`httpx` auth flow backed by the helper chain.
    config: XDG-aware settings and git-style per-URL lookup.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer application and ``credchain`` entry point.
"""

__version__ = "0.1.0"
