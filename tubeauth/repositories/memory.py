"""In-process user repository for development and tests."""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import UUID, uuid4

import structlog

from tubeauth.models.user import User
from tubeauth.repositories.base import DuplicateUserError

logger = structlog.get_logger(__name__)


class InMemoryUserRepository:
    """Dict-backed UserRepository.

    A single asyncio.Lock serializes every read and write, which makes the
    compare-and-set on the refresh token atomic. Records are copied on the
    way in and out so callers never hold a live reference.
    """

    def __init__(self):
        self._users: Dict[UUID, User] = {}
        self._lock = asyncio.Lock()

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        avatar_url: str,
        cover_image_url: str,
        password_hash: str,
    ) -> User:
        async with self._lock:
            if self._find_by_username_or_email(username, email) is not None:
                raise DuplicateUserError(f"username or email already taken: {username}")

            now = datetime.now(timezone.utc)
            user = User(
                id=uuid4(),
                username=username,
                email=email,
                full_name=full_name,
                avatar_url=avatar_url,
                cover_image_url=cover_image_url,
                password_hash=password_hash,
                current_refresh_token=None,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user

        logger.debug("memory_user_created", user_id=str(user.id))
        return user.model_copy()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        async with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    async def find_by_identifier(self, identifier: str) -> Optional[User]:
        lowered = identifier.lower()
        async with self._lock:
            for user in self._users.values():
                if user.username == lowered:
                    return user.model_copy()
            for user in self._users.values():
                if user.email == identifier:
                    return user.model_copy()
        return None

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        async with self._lock:
            user = self._find_by_username_or_email(username, email)
            return user.model_copy() if user else None

    def _find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        lowered = username.lower()
        for user in self._users.values():
            if user.username == lowered or user.email == email:
                return user
        return None

    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        return await self._update(user_id, password_hash=password_hash)

    async def set_refresh_token(self, user_id: UUID, token: Optional[str]) -> bool:
        return await self._update(user_id, current_refresh_token=token)

    async def compare_and_set_refresh_token(
        self, user_id: UUID, expected: Optional[str], new: Optional[str]
    ) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None or user.current_refresh_token != expected:
                return False
            self._users[user_id] = user.model_copy(
                update={
                    "current_refresh_token": new,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            return True

    async def delete_user(self, user_id: UUID) -> bool:
        async with self._lock:
            return self._users.pop(user_id, None) is not None

    async def _update(self, user_id: UUID, **fields) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            fields["updated_at"] = datetime.now(timezone.utc)
            self._users[user_id] = user.model_copy(update=fields)
            return True
