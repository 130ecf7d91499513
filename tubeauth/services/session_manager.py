"""Session lifecycle and the refresh-token rotation protocol."""

from typing import Any, Dict
from uuid import UUID

import structlog

from tubeauth.models.auth import TokenPair
from tubeauth.models.result import AuthErrorKind, Result
from tubeauth.models.user import User
from tubeauth.repositories.base import UserRepository
from tubeauth.services.session_store import SessionStore
from tubeauth.services.token_issuer import TokenIssuer

logger = structlog.get_logger(__name__)


def profile_claims(user: User) -> Dict[str, Any]:
    """Profile fields embedded in access tokens."""
    return {
        "username": user.username,
        "email": user.email,
        "full_name": user.full_name,
    }


class SessionManager:
    """Owns the per-user session state machine.

    A user is either without a session (no stored refresh token) or has
    exactly one active session identified by the stored refresh token.
    ``start_session`` replaces any previous session, ``rotate`` exchanges
    the active refresh token for a new pair, ``end_session`` clears it.

    Args:
        repository: User repository providing compare-and-set on the token
        token_issuer: Mints and verifies the token pair
        revoke_on_reuse: Also clear the active session when a superseded
            refresh token is presented
    """

    def __init__(
        self,
        repository: UserRepository,
        token_issuer: TokenIssuer,
        revoke_on_reuse: bool = False,
    ):
        self.repository = repository
        self.store = SessionStore(repository)
        self.token_issuer = token_issuer
        self.revoke_on_reuse = revoke_on_reuse

    async def start_session(self, user: User) -> Result[TokenPair]:
        """Issue a fresh pair and make its refresh token the active one."""
        pair = self.token_issuer.issue_pair(user.id, profile_claims(user))

        try:
            stored = await self.store.replace(user.id, pair.refresh_token)
        except Exception:
            logger.exception("session_start_persist_failed", user_id=str(user.id))
            return Result.failure(AuthErrorKind.INTERNAL, "Could not persist session")

        if not stored:
            logger.error("session_start_user_missing", user_id=str(user.id))
            return Result.failure(AuthErrorKind.INTERNAL, "Could not persist session")

        logger.info("session_started", user_id=str(user.id))
        return Result.success(pair)

    async def rotate(self, presented: str) -> Result[TokenPair]:
        """Exchange the active refresh token for a new pair.

        Returns:
            Result with the new pair, or UNAUTHORIZED (missing token, unknown
            user, ended session), REFRESH_REUSED (superseded token), a token
            verification failure, or INTERNAL (persistence error)
        """
        if not presented:
            return Result.failure(AuthErrorKind.UNAUTHORIZED, "Refresh token is required")

        verified = self.token_issuer.verify(presented, "refresh")
        if not verified.ok:
            return Result.from_error(verified.error)
        user_id = verified.value.user_id

        try:
            user = await self.repository.get_by_id(user_id)
        except Exception:
            logger.exception("rotate_user_load_failed", user_id=str(user_id))
            return Result.failure(AuthErrorKind.INTERNAL, "Could not load user")

        if user is None:
            logger.warning("rotate_unknown_user", user_id=str(user_id))
            return Result.failure(AuthErrorKind.UNAUTHORIZED, "User no longer exists")

        if user.current_refresh_token is None:
            logger.info("rotate_without_session", user_id=str(user_id))
            return Result.failure(AuthErrorKind.UNAUTHORIZED, "Session has ended")

        if user.current_refresh_token != presented:
            return await self._reuse_detected(user_id)

        pair = self.token_issuer.issue_pair(user.id, profile_claims(user))

        try:
            swapped = await self.store.swap(user_id, presented, pair.refresh_token)
        except Exception:
            logger.exception("rotate_persist_failed", user_id=str(user_id))
            return Result.failure(AuthErrorKind.INTERNAL, "Could not persist rotated token")

        if not swapped:
            # Another rotation committed between our read and our write.
            return await self._reuse_detected(user_id)

        logger.info("refresh_token_rotated", user_id=str(user_id))
        return Result.success(pair)

    async def end_session(self, user_id: UUID) -> Result[None]:
        """Clear the active refresh token. Ending an ended session is fine."""
        try:
            await self.store.clear(user_id)
        except Exception:
            logger.exception("session_end_persist_failed", user_id=str(user_id))
            return Result.failure(AuthErrorKind.INTERNAL, "Could not end session")

        logger.info("session_ended", user_id=str(user_id))
        return Result.success(None)

    async def _reuse_detected(self, user_id: UUID) -> Result[TokenPair]:
        logger.warning(
            "refresh_token_reuse_detected",
            user_id=str(user_id),
            revoking=self.revoke_on_reuse,
        )
        if self.revoke_on_reuse:
            try:
                await self.store.clear(user_id)
            except Exception:
                logger.exception("reuse_revocation_failed", user_id=str(user_id))
        return Result.failure(AuthErrorKind.REFRESH_REUSED, "Refresh token has already been used")
