"""Explicit outcome type shared by every auth component."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AuthErrorKind(str, Enum):
    """Failure taxonomy surfaced by the auth core."""

    VALIDATION = "validation_error"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    BAD_CREDENTIALS = "bad_credentials"
    UNAUTHORIZED = "unauthorized"
    TOKEN_INVALID = "token_invalid"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_MALFORMED = "token_malformed"
    REFRESH_REUSED = "refresh_reused"
    MEDIA_UPLOAD_FAILED = "media_upload_failed"
    INTERNAL = "internal_error"

    @property
    def status_code(self) -> int:
        """HTTP status this kind maps to."""
        return _STATUS_CODES[self]


_STATUS_CODES = {
    AuthErrorKind.VALIDATION: 400,
    AuthErrorKind.CONFLICT: 409,
    AuthErrorKind.NOT_FOUND: 404,
    AuthErrorKind.BAD_CREDENTIALS: 401,
    AuthErrorKind.UNAUTHORIZED: 401,
    AuthErrorKind.TOKEN_INVALID: 401,
    AuthErrorKind.TOKEN_EXPIRED: 401,
    AuthErrorKind.TOKEN_MALFORMED: 401,
    AuthErrorKind.REFRESH_REUSED: 401,
    AuthErrorKind.MEDIA_UPLOAD_FAILED: 400,
    AuthErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class AuthError:
    """A failure kind plus a caller-safe message."""

    kind: AuthErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return self.kind.status_code


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an AuthError, never both.

    Build instances with ``Result.success`` / ``Result.failure`` and check
    ``ok`` before reading ``value``.
    """

    value: Optional[T] = None
    error: Optional[AuthError] = None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: AuthErrorKind, message: str) -> "Result[T]":
        if kind is AuthErrorKind.INTERNAL:
            message = INTERNAL_ERROR_MESSAGE
        return cls(error=AuthError(kind=kind, message=message))

    @classmethod
    def from_error(cls, error: AuthError) -> "Result[T]":
        """Re-type a failure coming from another component."""
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[AuthErrorKind]:
        return self.error.kind if self.error else None
