"""User repository contract."""

from __future__ import annotations

from typing import Optional, Protocol
from uuid import UUID

from tubeauth.models.user import User


class DuplicateUserError(Exception):
    """Raised when a create would violate username/email uniqueness."""


class UserRepository(Protocol):
    """Persistence functions for user accounts.

    ``compare_and_set_refresh_token`` must be linearizable per user: the
    comparison and the write happen as one step, so two callers presenting
    the same expected value cannot both succeed.
    """

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        avatar_url: str,
        cover_image_url: str,
        password_hash: str,
    ) -> User:
        ...

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        ...

    async def find_by_identifier(self, identifier: str) -> Optional[User]:
        """Match ``identifier`` against the lower-cased username or the exact email."""
        ...

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        ...

    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        ...

    async def set_refresh_token(self, user_id: UUID, token: Optional[str]) -> bool:
        ...

    async def compare_and_set_refresh_token(
        self, user_id: UUID, expected: Optional[str], new: Optional[str]
    ) -> bool:
        ...
