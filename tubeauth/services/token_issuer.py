"""Signed access/refresh token minting and verification."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import jwt
import structlog

from tubeauth.models.auth import TokenClaims, TokenPair, TokenType
from tubeauth.models.result import AuthErrorKind, Result

logger = structlog.get_logger(__name__)

# Constants
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 10

REQUIRED_CLAIMS = ["sub", "iat", "exp", "type", "jti"]
RESERVED_CLAIMS = frozenset(REQUIRED_CLAIMS)


class TokenIssuer:
    """Mints and verifies JWTs for the two token types.

    Access and refresh tokens are signed with separate secrets and carry a
    ``type`` claim, so one kind can never be accepted in place of the other.
    Every token also carries a random ``jti`` which keeps two tokens minted
    for the same user within the same second distinct.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_expire_days: int = REFRESH_TOKEN_EXPIRE_DAYS,
        algorithm: str = JWT_ALGORITHM,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh token secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh token secrets must differ")

        self._secrets = {"access": access_secret, "refresh": refresh_secret}
        self._lifetimes = {
            "access": timedelta(minutes=access_expire_minutes),
            "refresh": timedelta(days=refresh_expire_days),
        }
        self.algorithm = algorithm

    @property
    def access_token_lifetime_seconds(self) -> int:
        return int(self._lifetimes["access"].total_seconds())

    def _issue(
        self,
        token_type: TokenType,
        user_id: UUID,
        claims: Optional[Dict[str, Any]] = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            k: v for k, v in (claims or {}).items() if k not in RESERVED_CLAIMS
        }
        payload.update(
            {
                "sub": str(user_id),
                "type": token_type,
                "jti": uuid.uuid4().hex,
                "iat": now,
                "exp": now + self._lifetimes[token_type],
            }
        )
        token = jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)
        logger.debug(
            "jwt_issued",
            user_id=str(user_id),
            kind=token_type,
            expires_at=payload["exp"].isoformat(),
        )
        return token

    def issue_access_token(
        self, user_id: UUID, claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """Create a short-lived access token.

        Args:
            user_id: Subject of the token
            claims: Extra profile claims (username, email, ...). Reserved
                claim names are ignored.

        Returns:
            Encoded JWT string
        """
        return self._issue("access", user_id, claims)

    def issue_refresh_token(self, user_id: UUID) -> str:
        """Create a long-lived refresh token carrying only the subject."""
        return self._issue("refresh", user_id)

    def issue_pair(
        self, user_id: UUID, claims: Optional[Dict[str, Any]] = None
    ) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id, claims),
            refresh_token=self.issue_refresh_token(user_id),
        )

    def verify(self, token: str, expected_type: TokenType) -> Result[TokenClaims]:
        """Check signature, expiry and type of a token.

        Args:
            token: Encoded JWT string
            expected_type: "access" or "refresh"

        Returns:
            Result holding the verified claims, or one of TOKEN_EXPIRED,
            TOKEN_INVALID, TOKEN_MALFORMED
        """
        if not isinstance(token, str) or not token:
            return Result.failure(AuthErrorKind.TOKEN_MALFORMED, "Token is missing or empty")

        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_type],
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            return Result.failure(AuthErrorKind.TOKEN_EXPIRED, f"{expected_type.capitalize()} token has expired")
        except jwt.InvalidSignatureError:
            return Result.failure(AuthErrorKind.TOKEN_INVALID, f"Invalid {expected_type} token")
        except jwt.DecodeError:
            return Result.failure(AuthErrorKind.TOKEN_MALFORMED, f"Malformed {expected_type} token")
        except jwt.InvalidTokenError as e:
            logger.info("jwt_rejected", kind=expected_type, reason=str(e))
            return Result.failure(AuthErrorKind.TOKEN_INVALID, f"Invalid {expected_type} token")

        if payload.get("type") != expected_type:
            return Result.failure(AuthErrorKind.TOKEN_INVALID, f"Invalid {expected_type} token")

        try:
            user_id = UUID(str(payload["sub"]))
        except ValueError:
            return Result.failure(AuthErrorKind.TOKEN_INVALID, f"Invalid {expected_type} token")

        extra = {k: v for k, v in payload.items() if k not in RESERVED_CLAIMS}
        return Result.success(
            TokenClaims(
                user_id=user_id,
                token_type=expected_type,
                token_id=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                extra=extra,
            )
        )
