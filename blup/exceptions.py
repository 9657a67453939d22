"""
Blup exception hierarchy.

All exceptions inherit from BlupError for easy catching.
"""

from typing import Any


class BlupError(Exception):
    """Base exception for all blup errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items() if v is not None)
            if ctx:
                return f"{self.message} ({ctx})"
        return self.message


class ConfigurationError(BlupError):
    """Local setup is incomplete; the user must configure something first."""


class NoAccountError(ConfigurationError):
    """No active account could be resolved."""

    def __init__(self, message: str = "No account found. Run 'blup create' first.") -> None:
        super().__init__(message)


class NoServersConfigured(ConfigurationError):
    """The resolved server list is empty."""

    def __init__(
        self, message: str = "No servers configured. Run 'blup server <url>' first."
    ) -> None:
        super().__init__(message)


class InvalidInput(BlupError):
    """A user-supplied argument is malformed (URL, hash, selection, key)."""


class AccountExistsError(InvalidInput):
    """An account with this name already exists."""

    def __init__(self, message: str, *, account: str) -> None:
        super().__init__(message, account=account)
        self.account = account


class AccountNotFoundError(InvalidInput):
    """No account with this name is registered."""

    def __init__(self, message: str, *, account: str) -> None:
        super().__init__(message, account=account)
        self.account = account


class AuthError(BlupError):
    """Stored credential is invalid, or signing failed."""


class TransportError(BlupError):
    """Network failure, or a non-2xx response without a structured reason."""

    def __init__(
        self, message: str, *, status_code: int | None = None, url: str | None = None
    ) -> None:
        super().__init__(message, status_code=status_code, url=url)
        self.status_code = status_code
        self.url = url


class RequestTimeout(TransportError):
    """The request did not complete within its time budget."""


class PublishError(TransportError):
    """No relay acknowledged a published event."""

    def __init__(self, message: str, *, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class UploadRejected(BlupError):
    """The server declined an upload, with a reason or a status code."""

    def __init__(self, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(reason, status_code=status_code)
        self.reason = reason
        self.status_code = status_code
