"""Configuration management with XDG paths, atomic writes, and per-URL lookup.

This module handles all persistent configuration for credchain:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.credchain/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings** -- A single :class:`~credchain.models.Settings` JSON file,
  optionally layered with a project-local ``./credchain.json``. See
  :func:`resolve_settings`.
* **Per-URL lookup** -- :func:`url_config_get` resolves a credential option
  for a URL the way git resolves ``credential.<url>.<key>``: the most
  specific matching URL prefix wins.
* **Environment flags** -- :func:`env_bool` parses git-style booleans such
  as ``GIT_TERMINAL_PROMPT``.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from credchain.exceptions import ConfigError
from credchain.models import CredentialSettings, Settings

_APP_NAME = "credchain"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "credchain.json"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses XDG base directories (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/credchain/`` (default ``~/.config/credchain/``).
    On macOS/Windows: ``~/.credchain/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/credchain/`` (default ``~/.local/share/credchain/``).
    On macOS/Windows: ``~/.credchain/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings ---


def settings_path() -> Path:
    """Path to the user-wide settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, what: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {what} at {path}: expected a JSON object")
    return data


def load_settings() -> Settings:
    """Load the user-wide settings from the XDG config directory.

    Returns:
        The deserialised :class:`~credchain.models.Settings`. If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    data = _read_json(path, "settings")
    try:
        return Settings.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist *settings* atomically to :func:`settings_path`."""
    data = settings.model_dump(mode="json", exclude_none=True)
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


def load_project_settings() -> Optional[dict[str, Any]]:
    """Load project-local overrides from ``./credchain.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def resolve_settings() -> Settings:
    """Return the effective settings.

    Precedence (high to low):
        1. Project config (``./credchain.json``), per top-level key
        2. User config (``~/.config/credchain/config.json``)
        3. Defaults

    Raises:
        ConfigError: If either file is invalid.
    """
    settings = load_settings()
    project = load_project_settings()
    if not project:
        return settings

    merged = settings.model_dump(mode="json")
    merged.update(project)
    try:
        return Settings.model_validate(merged)
    except ValueError as exc:
        raise ConfigError(f"Invalid project config: {exc}") from exc


# --- Per-URL lookup ---


def _url_candidates(rawurl: str) -> list[str]:
    """Return URL prefixes of *rawurl*, most specific first.

    ``https://host/a/b`` yields ``https://host/a/b``, ``https://host/a`` and
    ``https://host``. Query strings, fragments and user info are ignored.
    """
    parts = urlsplit(rawurl)
    host = parts.netloc.rpartition("@")[2]
    base = f"{parts.scheme}://{host}"

    segments = [s for s in parts.path.split("/") if s]
    candidates = []
    while segments:
        candidates.append(base + "/" + "/".join(segments))
        segments.pop()
    candidates.append(base)
    return candidates


def url_config_get(settings: Settings, rawurl: str, key: str) -> Any:
    """Look up credential option *key* for *rawurl*.

    Entries in ``settings.urls`` are matched against successively shorter
    prefixes of *rawurl*; a trailing slash on an entry is ignored. The first
    entry that sets *key* wins, then ``settings.credential``.

    Args:
        settings: The effective settings.
        rawurl: The target URL.
        key: A :class:`~credchain.models.CredentialSettings` field name.

    Returns:
        The configured value, or ``None`` if no entry sets it.
    """
    by_prefix: dict[str, CredentialSettings] = {
        url.rstrip("/"): entry for url, entry in settings.urls.items()
    }
    for candidate in _url_candidates(rawurl):
        entry = by_prefix.get(candidate)
        if entry is not None:
            value = getattr(entry, key, None)
            if value is not None:
                return value
    return getattr(settings.credential, key, None)


def url_config_bool(settings: Settings, rawurl: str, key: str, default: bool) -> bool:
    """Like :func:`url_config_get`, returning *default* when *key* is unset."""
    value = url_config_get(settings, rawurl, key)
    if value is None:
        return default
    return bool(value)


# --- Environment ---


def env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    """Parse a git-style boolean environment variable.

    Args:
        environ: The environment to read (usually ``os.environ``).
        name: Variable name.
        default: Value used when the variable is not set.

    Raises:
        ConfigError: If the value is not a recognised boolean.
    """
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean value for {name}: {raw!r}")


def allow_terminal_prompt(environ: Mapping[str, str]) -> bool:
    """Return whether interactive prompting is allowed (``GIT_TERMINAL_PROMPT``)."""
    return env_bool(environ, "GIT_TERMINAL_PROMPT", True)
