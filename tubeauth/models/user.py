"""User records and their public view."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class User(BaseModel):
    """A registered account as stored by the user repository.

    Carries the password hash and the single active refresh token, so it
    must never leave the auth core. Use ``to_public()`` for responses.
    """

    id: UUID
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str = ""
    password_hash: str
    current_refresh_token: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def to_public(self) -> "PublicUser":
        return PublicUser(
            id=self.id,
            username=self.username,
            email=self.email,
            full_name=self.full_name,
            avatar_url=self.avatar_url,
            cover_image_url=self.cover_image_url,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class PublicUser(BaseModel):
    """User representation safe to return to callers."""

    id: UUID
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str = ""
    created_at: datetime
    updated_at: datetime
