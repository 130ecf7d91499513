"""Authentication facade: register, login, logout, refresh, change password."""

import functools
from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

import structlog

from tubeauth.config import Settings
from tubeauth.models.auth import LoginRequest, LoginResult, RegisterInput, TokenPair
from tubeauth.models.result import AuthErrorKind, Result
from tubeauth.models.user import PublicUser
from tubeauth.repositories.base import DuplicateUserError, UserRepository
from tubeauth.services.credential_verifier import CredentialVerifier
from tubeauth.services.media_store import MediaStore
from tubeauth.services.password_hasher import PasswordHasher
from tubeauth.services.session_manager import SessionManager
from tubeauth.services.token_issuer import TokenIssuer

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def boundary(operation: str):
    """Turn any exception escaping an operation into an INTERNAL result."""

    def decorator(func: Callable[..., Awaitable[Result[T]]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Result[T]:
            try:
                return await func(*args, **kwargs)
            except Exception:
                logger.exception("auth_operation_failed", operation=operation)
                return Result.failure(AuthErrorKind.INTERNAL, "Internal server error")

        return wrapper

    return decorator


class AuthService:
    """Entry point for every authentication operation.

    All collaborators are passed in; the service holds no global state.
    Each public method returns a Result and never raises.

    Args:
        repository: User persistence
        media_store: Avatar / cover image uploads
        password_hasher: bcrypt hashing
        token_issuer: JWT minting and verification
        session_manager: Optional pre-built session manager; one is built
            from ``repository`` and ``token_issuer`` otherwise
        revoke_sessions_on_password_change: Clear the active refresh token
            after a successful password change
    """

    def __init__(
        self,
        repository: UserRepository,
        media_store: MediaStore,
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
        session_manager: Optional[SessionManager] = None,
        revoke_sessions_on_password_change: bool = False,
    ):
        self.repository = repository
        self.media_store = media_store
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer
        self.credentials = CredentialVerifier(repository, password_hasher)
        self.sessions = session_manager or SessionManager(repository, token_issuer)
        self.revoke_sessions_on_password_change = revoke_sessions_on_password_change

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repository: UserRepository,
        media_store: MediaStore,
    ) -> "AuthService":
        token_issuer = TokenIssuer(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            access_expire_minutes=settings.access_token_expire_minutes,
            refresh_expire_days=settings.refresh_token_expire_days,
            algorithm=settings.jwt_algorithm,
        )
        return cls(
            repository=repository,
            media_store=media_store,
            password_hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            token_issuer=token_issuer,
            session_manager=SessionManager(
                repository,
                token_issuer,
                revoke_on_reuse=settings.revoke_session_on_reuse,
            ),
            revoke_sessions_on_password_change=settings.revoke_sessions_on_password_change,
        )

    @boundary("register")
    async def register(self, data: RegisterInput) -> Result[PublicUser]:
        """Create an account.

        Steps: require every text field, reject a taken username/email,
        require and upload the avatar, upload the optional cover image,
        hash the password, create the record and read it back.

        Returns:
            Result with the PublicUser, or VALIDATION, CONFLICT,
            MEDIA_UPLOAD_FAILED, INTERNAL
        """
        fields = [data.full_name, data.email, data.username, data.password]
        if any(not (field or "").strip() for field in fields):
            return Result.failure(AuthErrorKind.VALIDATION, "All fields are required")

        username = data.username.strip().lower()
        email = data.email.strip()

        existing = await self.repository.find_by_username_or_email(username, email)
        if existing is not None:
            return Result.failure(
                AuthErrorKind.CONFLICT, "User with same username or email already exists"
            )

        if not data.avatar_path:
            return Result.failure(AuthErrorKind.VALIDATION, "Avatar file is required")

        avatar = await self.media_store.upload(data.avatar_path)
        if avatar is None:
            return Result.failure(AuthErrorKind.MEDIA_UPLOAD_FAILED, "Avatar upload failed")

        cover = await self.media_store.upload(data.cover_image_path)

        password_hash = self.password_hasher.hash(data.password)

        try:
            user = await self.repository.create_user(
                username=username,
                email=email,
                full_name=data.full_name.strip(),
                avatar_url=avatar.url,
                cover_image_url=cover.url if cover else "",
                password_hash=password_hash,
            )
        except DuplicateUserError:
            return Result.failure(
                AuthErrorKind.CONFLICT, "User with same username or email already exists"
            )

        created = await self.repository.get_by_id(user.id)
        if created is None:
            logger.error("user_readback_missing", user_id=str(user.id))
            return Result.failure(AuthErrorKind.INTERNAL, "Something went wrong while registering")

        logger.info("user_registered", user_id=str(created.id), username=created.username)
        return Result.success(created.to_public())

    @boundary("login")
    async def login(self, credentials: LoginRequest) -> Result[LoginResult]:
        """Verify credentials and start a new session.

        The username is looked up first; a supplied email is tried when the
        username matches nobody. Starting a session replaces any previous
        one for the same user.
        """
        identifier = credentials.identifier
        if not identifier:
            return Result.failure(AuthErrorKind.VALIDATION, "Username or email is required")

        verified = await self.credentials.verify_credentials(
            identifier, credentials.password, credentials.fallback_identifier
        )
        if not verified.ok:
            return Result.from_error(verified.error)
        user = verified.value

        session = await self.sessions.start_session(user)
        if not session.ok:
            return Result.from_error(session.error)

        logger.info("user_logged_in", user_id=str(user.id))
        return Result.success(LoginResult(user=user.to_public(), tokens=session.value))

    @boundary("logout")
    async def logout(self, user_id: UUID) -> Result[None]:
        return await self.sessions.end_session(user_id)

    @boundary("refresh")
    async def refresh(self, refresh_token: Optional[str]) -> Result[TokenPair]:
        return await self.sessions.rotate(refresh_token or "")

    @boundary("change_password")
    async def change_password(
        self, user_id: UUID, old_password: str, new_password: str
    ) -> Result[None]:
        """Replace the password after checking the current one.

        The active session survives unless revoke_sessions_on_password_change
        is set.
        """
        if not (new_password or "").strip():
            return Result.failure(AuthErrorKind.VALIDATION, "New password is required")

        user = await self.repository.get_by_id(user_id)
        if user is None:
            return Result.failure(AuthErrorKind.NOT_FOUND, "User does not exist")

        if not self.password_hasher.verify(old_password, user.password_hash):
            logger.info("password_change_rejected", user_id=str(user_id))
            return Result.failure(AuthErrorKind.BAD_CREDENTIALS, "Invalid old password")

        updated = await self.repository.update_password(
            user_id, self.password_hasher.hash(new_password)
        )
        if not updated:
            return Result.failure(AuthErrorKind.INTERNAL, "Could not update password")

        if self.revoke_sessions_on_password_change:
            ended = await self.sessions.end_session(user_id)
            if not ended.ok:
                return ended

        logger.info(
            "password_changed",
            user_id=str(user_id),
            sessions_revoked=self.revoke_sessions_on_password_change,
        )
        return Result.success(None)

    @boundary("authenticate")
    async def authenticate(self, access_token: Optional[str]) -> Result[PublicUser]:
        """Resolve an access token to the user it was issued for."""
        if not access_token:
            return Result.failure(AuthErrorKind.UNAUTHORIZED, "Unauthorized request")

        verified = self.token_issuer.verify(access_token, "access")
        if not verified.ok:
            return Result.from_error(verified.error)

        user = await self.repository.get_by_id(verified.value.user_id)
        if user is None:
            return Result.failure(AuthErrorKind.UNAUTHORIZED, "Invalid access token")

        return Result.success(user.to_public())
