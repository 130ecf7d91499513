"""asyncpg-backed user repository."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from tubeauth.models.user import User
from tubeauth.repositories.base import DuplicateUserError

logger = structlog.get_logger(__name__)

USER_COLUMNS = """
    id, username, email, full_name, avatar_url, cover_image_url,
    password_hash, current_refresh_token, created_at, updated_at
"""


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        full_name=row["full_name"],
        avatar_url=row["avatar_url"],
        cover_image_url=row["cover_image_url"],
        password_hash=row["password_hash"],
        current_refresh_token=row["current_refresh_token"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresUserRepository:
    """UserRepository on an asyncpg pool.

    The refresh-token compare-and-set is a single conditional UPDATE, so
    Postgres row locking serializes concurrent rotations for one user.

    Args:
        pool: Pool from ``tubeauth.database.create_pool``; the caller owns it
    """

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        avatar_url: str,
        cover_image_url: str,
        password_hash: str,
    ) -> User:
        """Insert a new user row.

        Raises:
            DuplicateUserError: If username or email is already taken
        """
        now = datetime.now(timezone.utc)
        pool = self._pool

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO users (id, username, email, full_name, avatar_url, cover_image_url,
                                       password_hash, current_refresh_token, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, NULL, $8, $9)
                    RETURNING {USER_COLUMNS}
                    """,
                    uuid4(),
                    username,
                    email,
                    full_name,
                    avatar_url,
                    cover_image_url,
                    password_hash,
                    now,
                    now,
                )
        except asyncpg.exceptions.UniqueViolationError as e:
            raise DuplicateUserError(str(e)) from e

        logger.info("user_row_inserted", user_id=str(row["id"]))
        return _row_to_user(row)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        pool = self._pool

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = $1",
                user_id,
            )

        return _row_to_user(row) if row is not None else None

    async def find_by_identifier(self, identifier: str) -> Optional[User]:
        """Match lower-cased username first, then exact email."""
        pool = self._pool

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE username = LOWER($1) OR email = $1
                ORDER BY (username = LOWER($1)) DESC
                LIMIT 1
                """,
                identifier,
            )

        return _row_to_user(row) if row is not None else None

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        pool = self._pool

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE username = LOWER($1) OR email = $2
                LIMIT 1
                """,
                username,
                email,
            )

        return _row_to_user(row) if row is not None else None

    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        pool = self._pool

        async with pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE users
                SET password_hash = $1, updated_at = $2
                WHERE id = $3
                """,
                password_hash,
                datetime.now(timezone.utc),
                user_id,
            )

        return result == "UPDATE 1"

    async def set_refresh_token(self, user_id: UUID, token: Optional[str]) -> bool:
        pool = self._pool

        async with pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE users
                SET current_refresh_token = $1, updated_at = $2
                WHERE id = $3
                """,
                token,
                datetime.now(timezone.utc),
                user_id,
            )

        return result == "UPDATE 1"

    async def compare_and_set_refresh_token(
        self, user_id: UUID, expected: Optional[str], new: Optional[str]
    ) -> bool:
        pool = self._pool

        async with pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE users
                SET current_refresh_token = $1, updated_at = $2
                WHERE id = $3 AND current_refresh_token IS NOT DISTINCT FROM $4
                """,
                new,
                datetime.now(timezone.utc),
                user_id,
                expected,
            )

        swapped = result == "UPDATE 1"
        if not swapped:
            logger.info("refresh_token_cas_lost", user_id=str(user_id))
        return swapped
