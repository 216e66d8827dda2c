"""Error hierarchy for the LicenseChain SDK.

Every API failure is raised as a ``LicenseChainError`` subclass tagged with an
``ErrorKind``, so callers can branch either on the exception type or on
``error.kind``.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Classification of SDK errors."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    UNKNOWN = "unknown"


class LicenseChainError(Exception):
    """Base exception for all LicenseChain errors.

    Attributes:
        message: Human-readable error message
        code: Provider-supplied error code, if any
        status_code: HTTP status of the response that caused the error
        details: Extra context for debugging (status code, raw body, ...)
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    retryable: bool = False

    def __init__(
        self,
        message: str = "LicenseChain error occurred",
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"code={self.code!r}, status_code={self.status_code!r})"
        )


class ValidationError(LicenseChainError):
    """Invalid input, either rejected locally or by the API (400 and other 4xx)."""

    kind = ErrorKind.VALIDATION


class InvalidTimestampError(ValidationError):
    """A webhook timestamp could not be parsed."""


class AuthenticationError(LicenseChainError):
    """Credentials are missing, invalid, or lack permission (401/403)."""

    kind = ErrorKind.AUTHENTICATION


class NotFoundError(LicenseChainError):
    """The requested resource does not exist (404)."""

    kind = ErrorKind.NOT_FOUND


class RateLimitError(LicenseChainError):
    """Too many requests (429).

    Carries the rate-limit metadata the API returns in the response body.
    """

    kind = ErrorKind.RATE_LIMIT
    retryable = True

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        retry_after: Optional[int] = None,
        limit: Optional[int] = None,
        remaining: Optional[int] = None,
        reset: Optional[int] = None,
    ):
        super().__init__(message, code, status_code, details)
        self.retry_after = retry_after
        self.limit = limit
        self.remaining = remaining
        self.reset = reset

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "retry_after": self.retry_after,
                "limit": self.limit,
                "remaining": self.remaining,
                "reset": self.reset,
            }
        )
        return data


class ServerError(LicenseChainError):
    """The API failed to process the request (5xx)."""

    kind = ErrorKind.SERVER
    retryable = True


class InvalidResponseError(ServerError):
    """A successful response whose body could not be decoded.

    The request already took effect, so it is never re-sent.
    """

    retryable = False


class NetworkError(LicenseChainError):
    """The request never produced a response (connection failure, timeout)."""

    kind = ErrorKind.NETWORK
    retryable = True
