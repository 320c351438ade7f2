"""Pydantic models for credchain's persisted settings.

Settings are serialised as JSON in the user's config directory (see
:mod:`credchain.config`) and mirror the git configuration keys that decide
which credential helpers take part:

==============================  ==================================
git key                         settings field
==============================  ==================================
``core.askpass``                :attr:`Settings.askpass`
``lfs.cachecredentials``        :attr:`Settings.cache_credentials`
``credential.helper``           :attr:`CredentialSettings.helper`
``credential.useHttpPath``      :attr:`CredentialSettings.use_http_path`
``credential.<url>.*``          :attr:`Settings.urls`
==============================  ==================================

Models use ``extra="allow"`` so that keys written by newer versions are
preserved in ``model_extra`` when the file is saved again.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialSettings(BaseModel):
    """Credential options for one URL prefix, or for all URLs.

    ``None`` means "not set here"; per-URL lookup then falls back to a less
    specific entry. See :func:`credchain.config.url_config_get`.

    Example::

        CredentialSettings(helper="store", use_http_path=True)
    """

    model_config = ConfigDict(extra="allow")

    helper: Optional[str] = Field(
        default=None,
        description="Explicit credential helper; disables the askpass prompt for matching URLs",
    )
    use_http_path: Optional[bool] = Field(
        default=None,
        description="Include the URL path in the credential lookup",
    )


class Settings(BaseModel):
    """User-wide settings persisted at ``~/.config/credchain/config.json``.

    Loaded by :func:`~credchain.config.load_settings`. Environment variables
    (``GIT_ASKPASS``, ``SSH_ASKPASS``, ``GIT_TERMINAL_PROMPT``) are read by
    :class:`~credchain.context.CredentialHelperContext` and are not stored
    here.
    """

    model_config = ConfigDict(extra="allow")

    askpass: Optional[str] = Field(
        default=None, description="Askpass program (git's core.askpass)"
    )
    cache_credentials: bool = Field(
        default=True, description="Cache approved credentials in memory"
    )
    credential: CredentialSettings = Field(
        default_factory=CredentialSettings,
        description="Defaults applied to every URL",
    )
    urls: dict[str, CredentialSettings] = Field(
        default_factory=dict,
        description="Per-URL overrides keyed by URL prefix",
    )
