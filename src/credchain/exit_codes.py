"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~credchain.exceptions.CredchainError` subclass.
Wrapper scripts can inspect the exit code to tell "no credentials" apart
from a broken configuration without parsing stderr.

Example::

    $ credchain fill https://git.example.com/repo
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- no helper produced credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or malformed input."""

EXIT_AUTH_FAILURE = 3
"""No credentials could be filled, approved, or rejected."""
