"""Username/email + password verification."""

from typing import Optional

import structlog

from tubeauth.models.result import AuthErrorKind, Result
from tubeauth.models.user import User
from tubeauth.repositories.base import UserRepository
from tubeauth.services.password_hasher import PasswordHasher

logger = structlog.get_logger(__name__)


class CredentialVerifier:
    """Confirms a login identifier and password against stored records."""

    def __init__(self, repository: UserRepository, hasher: PasswordHasher):
        self.repository = repository
        self.hasher = hasher

    async def verify_credentials(
        self,
        identifier: str,
        password: str,
        fallback_identifier: Optional[str] = None,
    ) -> Result[User]:
        """Look up a user by username or email and check the password.

        Args:
            identifier: Username (compared lower-cased) or email (exact)
            password: Plain-text password
            fallback_identifier: Tried only when ``identifier`` matches no
                record, e.g. the email sent alongside a username

        Returns:
            Result with the matching User, NOT_FOUND when no record
            matches, or BAD_CREDENTIALS when the password is wrong
        """
        user = await self.repository.find_by_identifier(identifier)
        if user is None and fallback_identifier and fallback_identifier != identifier:
            user = await self.repository.find_by_identifier(fallback_identifier)

        if user is None:
            logger.info("credentials_user_not_found")
            return Result.failure(AuthErrorKind.NOT_FOUND, "User does not exist")

        if not self.hasher.verify(password, user.password_hash):
            logger.info("credentials_password_mismatch", user_id=str(user.id))
            return Result.failure(AuthErrorKind.BAD_CREDENTIALS, "Invalid user credentials")

        return Result.success(user)
