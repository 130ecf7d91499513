"""Auth inputs, token shapes and response envelopes."""

from datetime import datetime
from typing import Any, Dict, Generic, Literal, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from tubeauth.models.user import PublicUser

T = TypeVar("T")

TokenType = Literal["access", "refresh"]


class RegisterInput(BaseModel):
    """Registration details handed to the auth core.

    Blank text fields are reported by ``AuthService.register`` as a
    validation failure rather than rejected here, so callers get one
    consistent error for every missing field.

    Attributes:
        full_name: Display name
        email: Contact address (unique)
        username: Handle (unique, stored lower-cased)
        password: Plain-text password, hashed before storage
        avatar_path: Local path of the uploaded avatar file (required)
        cover_image_path: Local path of the uploaded cover image (optional)
    """

    full_name: str = ""
    email: str = ""
    username: str = ""
    password: str = ""
    avatar_path: Optional[str] = None
    cover_image_path: Optional[str] = None


class LoginRequest(BaseModel):
    """Login with either a username or an email, plus the password."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: str = Field(..., min_length=1)

    @field_validator("username", "email")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat whitespace-only identifiers as absent."""
        if v is None:
            return v
        stripped = v.strip()
        return stripped or None

    @property
    def identifier(self) -> Optional[str]:
        """Username when given, otherwise the email."""
        return self.username or self.email

    @property
    def fallback_identifier(self) -> Optional[str]:
        """The email, when it was sent alongside a username."""
        return self.email if self.username else None


class RefreshRequest(BaseModel):
    """Body form of the refresh call; the cookie takes precedence."""

    refresh_token: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Request to replace the current password.

    Attributes:
        old_password: Current password, checked against the stored hash
        new_password: Replacement password
    """

    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)

    @field_validator("new_password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        """Ensure password is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Password cannot be empty or whitespace only")
        return v


class TokenPair(BaseModel):
    """Freshly minted access and refresh tokens."""

    access_token: str
    refresh_token: str


class TokenClaims(BaseModel):
    """Verified contents of an access or refresh token."""

    user_id: UUID
    token_type: TokenType
    token_id: str
    issued_at: datetime
    expires_at: datetime
    extra: Dict[str, Any] = Field(default_factory=dict)


class LoginResult(BaseModel):
    """Outcome of a successful login."""

    user: PublicUser
    tokens: TokenPair


class TokenResponse(BaseModel):
    """Token pair as returned over HTTP.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Long-lived JWT exchanged for a new pair
        token_type: Always "bearer"
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")


class LoginResponse(TokenResponse):
    """Token pair plus the logged-in user."""

    user: PublicUser


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope used by every auth endpoint."""

    status_code: int
    data: Optional[T] = None
    message: str = "Success"
    success: bool = True
