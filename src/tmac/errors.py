from __future__ import annotations

from typing import Optional


class TmacError(Exception):
    """Base class for every error raised by the task management client."""


# PUBLIC_INTERFACE
class ValidationError(TmacError, ValueError):
    """
    Malformed caller input (for example a non-numeric user id).

    Raised immediately; the request never reaches the network.
    """


# PUBLIC_INTERFACE
class TransportError(TmacError):
    """No usable response was received (DNS failure, refused connection, timeout, undecodable body, redirect loop)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


# PUBLIC_INTERFACE
class HTTPStatusError(TmacError):
    """
    A response was received but its status code indicates failure.

    Attributes:
    - status_code: numeric HTTP status
    - reason: status text (reason phrase)
    - body: best-effort response body text, '' when it could not be read
    """

    def __init__(self, status_code: int, reason: str, body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"API request failed: {status_code} {reason} - {body}")


# PUBLIC_INTERFACE
class DeserializationError(TmacError):
    """A record or payload could not be turned into an entity."""


# PUBLIC_INTERFACE
class InvariantViolation(TmacError, TypeError):
    """An operation would leave an entity in an inconsistent state."""
