"""Error taxonomy shared by the remote reporting and analysis client ports."""

from __future__ import annotations

import math


class RemoteServiceError(RuntimeError):
    """Base class for normalized failures of remote collaborators."""


class NotFoundError(RemoteServiceError):
    """Raised when a queue (or other remote resource) does not resolve."""


class TransportError(RemoteServiceError):
    """Raised on network, timeout, or malformed-response failures."""


class AuthError(RemoteServiceError):
    """Raised when credentials or the session are rejected."""


class RateLimitError(RemoteServiceError):
    """Raised when the remote service throttles the caller."""

    def __init__(self, message: str = "", *, retry_after_seconds: float | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


def describe_remote_error(error: Exception) -> str:
    """Return a human-readable message for display in the dashboard."""

    details = str(error).strip()
    if isinstance(error, NotFoundError):
        prefix = "Not found"
    elif isinstance(error, AuthError):
        prefix = "Authentication failed"
    elif isinstance(error, RateLimitError):
        if error.retry_after_seconds is None:
            prefix = "Rate limited, try again shortly"
        else:
            prefix = f"Rate limited, try again in {math.ceil(error.retry_after_seconds)}s"
    elif isinstance(error, TransportError):
        prefix = "Connection problem"
    else:
        prefix = "Unexpected error"
    if not details:
        return prefix
    return f"{prefix}: {details}"
