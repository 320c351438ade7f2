"""Exception hierarchy for credchain.

All exceptions inherit from :class:`CredchainError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`credchain.exit_codes`.
The top-level error handler in :func:`credchain.app.main` catches
``CredchainError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    CredchainError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- CredentialError              (exit 3)
        +-- CredentialHelperError
        +-- CredentialFillError
        +-- NoCredentialHelpersError

The "try the next helper" signal, :class:`~credchain.helpers.base.HelperNoOp`,
deliberately lives outside this hierarchy: it must never be caught by a
handler written for real failures.
"""

from __future__ import annotations

from credchain.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class CredchainError(Exception):
    """Base exception for all credchain errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`credchain.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CredchainError):
    """Raised for invalid CLI arguments or malformed credential input."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(CredchainError):
    """Raised for configuration problems (invalid JSON, bad boolean env vars)."""

    exit_code = EXIT_GENERIC_FAILURE


class CredentialError(CredchainError):
    """Base class for failures while filling, approving, or rejecting credentials."""

    exit_code = EXIT_AUTH_FAILURE


class CredentialHelperError(CredentialError):
    """Raised by a single credential helper that malfunctioned.

    Examples: the helper program could not be launched, exited with an
    unexpected status, or wrote to its error stream.
    """


class CredentialFillError(CredentialError):
    """Raised when every helper in a chain was tried and at least one failed.

    The message lists every individual failure, one per line, so the caller
    can diagnose each broken helper rather than only the last one.

    Args:
        errors: The individual error messages, in helper order.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("credential fill errors:\n" + "\n".join(self.errors))


class NoCredentialHelpersError(CredentialError):
    """Raised when no helper in a chain accepted an approve or reject."""
