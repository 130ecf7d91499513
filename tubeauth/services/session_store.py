"""Accessor for the single persisted refresh token per user."""

from uuid import UUID

from tubeauth.repositories.base import UserRepository


class SessionStore:
    """Reads and writes ``User.current_refresh_token``.

    Nothing else in the package writes that field. Repository errors
    propagate to the caller unchanged.
    """

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def replace(self, user_id: UUID, token: str) -> bool:
        """Unconditionally store ``token``; False if the user does not exist."""
        return await self.repository.set_refresh_token(user_id, token)

    async def swap(self, user_id: UUID, expected: str, new: str) -> bool:
        """Store ``new`` only if the stored token still equals ``expected``."""
        return await self.repository.compare_and_set_refresh_token(user_id, expected, new)

    async def clear(self, user_id: UUID) -> bool:
        return await self.repository.set_refresh_token(user_id, None)
