"""Error taxonomy for shell commands and session transitions.

Every error raised synchronously by a command derives from ShellError.
The dispatcher renders them as "Error: <message>" output lines; none of
them leaves session or filesystem state partially updated.
"""


class ShellError(Exception):
    """Base class for errors surfaced to the terminal user.

    Args:
        message: Human-readable message shown after "Error: ".
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CommandValidationError(ShellError):
    """Raised when command arguments are missing or malformed."""


class PermissionDeniedError(ShellError):
    """Raised when the actor lacks the required tier or ACL membership."""


class NotFoundError(ShellError):
    """Raised when a path, host, port or account does not exist."""


class CredentialError(ShellError):
    """Raised when a credential check fails."""


class ExclusiveModeError(ShellError):
    """Raised when entering FTP or nc mode while another exclusive mode is active."""


class NoRemoteSessionError(ShellError):
    """Raised when exit() is called without a saved session to return to."""

    def __init__(self, message: str = "exit: not connected to a remote machine"):
        super().__init__(message)
