"""
Error Taxonomy

Exceptions raised by the submission pipeline, and the single translation
from any of them into a user-facing message.

Transport failures are classified once, in the HTTP layer (uploader and API
client), into NetworkError or RequestTimeoutError. Everything above that
layer only ever sees this taxonomy.
"""

from typing import Dict, Optional


class StorefrontError(Exception):
    """Base class for all submission pipeline errors."""


class ValidationError(StorefrontError):
    """User-correctable field errors. Never retried automatically."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        first = next(iter(self.errors.values()), "Invalid product data")
        super().__init__(first)


class MediaPermissionError(StorefrontError, PermissionError):
    """Camera or gallery access was denied."""

    def __init__(self, source: str, message: Optional[str] = None):
        self.source = source
        super().__init__(message or f"Permission to access the {source} was denied")


class NetworkError(StorefrontError):
    """The server could not be reached."""


class RequestTimeoutError(StorefrontError, TimeoutError):
    """The server did not answer within the request timeout."""


class AuthenticationError(StorefrontError):
    """No bearer token is available for the backend API."""


class ServerError(StorefrontError):
    """Non-2xx response from the backend product API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Server error ({status_code}): {message}")


class UploadError(StorefrontError):
    """Every upload credential was tried and none succeeded."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Image upload failed after {attempts} attempt(s): {last_error}"
        )


def describe_error(exc: BaseException) -> str:
    """
    Translate an exception into the message shown to the seller.

    Args:
        exc: Any exception that escaped a submission attempt

    Returns:
        Human-readable message
    """
    if isinstance(exc, ValidationError):
        return str(exc)
    if isinstance(exc, MediaPermissionError):
        return f"{exc} Please allow access in your device settings and try again."
    if isinstance(exc, UploadError):
        cause = exc.last_error
        if isinstance(cause, RequestTimeoutError):
            reason = "the upload timed out"
        elif isinstance(cause, NetworkError):
            reason = "check your connection"
        else:
            reason = str(cause) if cause else "unknown error"
        return f"Image upload failed after {exc.attempts} attempt(s) ({reason})."
    if isinstance(exc, RequestTimeoutError):
        return "Request timed out. The server took too long to respond, please try again."
    if isinstance(exc, NetworkError):
        return "Cannot connect to server. Please check your connection and try again."
    if isinstance(exc, ServerError):
        return exc.message
    if isinstance(exc, AuthenticationError):
        return "You are signed out. Please log in again."
    return str(exc) or exc.__class__.__name__
