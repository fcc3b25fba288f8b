"""Corridor MDM exception hierarchy.

All public exceptions inherit from CorridorMDMError, giving the CLI a single
base class to catch when it turns a failed provisioning pass into a non-zero
exit code without swallowing unrelated errors.

Every error is fatal to the run. The messages carry enough context (HTTP
status, raw response body, captured CLI output) to diagnose a failure from
the MDM console log alone.
"""

from __future__ import annotations


class CorridorMDMError(Exception):
    """Base exception for all Corridor MDM errors."""


class ConfigError(CorridorMDMError):
    """Raised when operator configuration is missing or still a placeholder.

    Covers the team token, the directory API token, unknown identity
    sources, and malformed configuration files.
    """


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------


class IdentityError(CorridorMDMError):
    """Raised when the device identity cannot be fully resolved.

    Attributes:
        field: Name of the identity field that could not be resolved.
    """

    field: str = "identity"


class NoSerialError(IdentityError):
    """Raised when no source yields a device serial number."""

    field = "serial"


class NoUserError(IdentityError):
    """Raised when the interactively logged-in user cannot be determined."""

    field = "user"


class NoEmailError(IdentityError):
    """Raised when the user's email cannot be obtained.

    Attributes:
        status_code: HTTP status of the directory lookup, if one was made.
        body: Raw response body of the directory lookup, if any.
    """

    field = "email"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


# ---------------------------------------------------------------------------
# Extension installation
# ---------------------------------------------------------------------------


class InstallError(CorridorMDMError):
    """Raised when the extension cannot be ensured for a detected editor.

    Attributes:
        editor: Display name of the editor being processed.
    """

    def __init__(self, message: str, *, editor: str) -> None:
        super().__init__(message)
        self.editor = editor


class CliMissingError(InstallError):
    """Raised when the editor's bundled command-line entry point is absent."""

    def __init__(self, message: str, *, editor: str, cli_path: str) -> None:
        super().__init__(message, editor=editor)
        self.cli_path = cli_path


class InstallFailedError(InstallError):
    """Raised when neither CLI output nor the filesystem confirm the install."""

    def __init__(self, message: str, *, editor: str, output: str) -> None:
        super().__init__(message, editor=editor)
        self.output = output


# ---------------------------------------------------------------------------
# Credential issuance
# ---------------------------------------------------------------------------


class ProvisionError(CorridorMDMError):
    """Raised when an API token cannot be issued or persisted for an editor.

    Attributes:
        editor: Display name of the editor being processed.
    """

    def __init__(self, message: str, *, editor: str) -> None:
        super().__init__(message)
        self.editor = editor


class UnreachableError(ProvisionError):
    """Raised on transport-level failures (connection errors, timeouts)."""


class RejectedError(ProvisionError):
    """Raised when the issuance endpoint answers with a non-200 status."""

    def __init__(
        self, message: str, *, editor: str, status_code: int, body: str,
    ) -> None:
        super().__init__(message, editor=editor)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(ProvisionError):
    """Raised when a 200 response does not carry a usable ``apiToken``.

    This is a server contract violation, not a transient condition.
    """

    def __init__(self, message: str, *, editor: str, body: str) -> None:
        super().__init__(message, editor=editor)
        self.body = body
