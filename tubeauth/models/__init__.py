"""Models package exports."""

from tubeauth.models.auth import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    LoginResult,
    RefreshRequest,
    RegisterInput,
    TokenClaims,
    TokenPair,
    TokenResponse,
)
from tubeauth.models.result import AuthError, AuthErrorKind, Result
from tubeauth.models.user import PublicUser, User

__all__ = [
    "ApiResponse",
    "AuthError",
    "AuthErrorKind",
    "ChangePasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "LoginResult",
    "PublicUser",
    "RefreshRequest",
    "RegisterInput",
    "Result",
    "TokenClaims",
    "TokenPair",
    "TokenResponse",
    "User",
]
