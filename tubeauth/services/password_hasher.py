"""bcrypt password hashing."""

import base64
import hashlib

import bcrypt
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """One-way password hashing and constant-time verification.

    Passwords are reduced with SHA-256 before bcrypt sees them. bcrypt only
    reads the first 72 bytes of its input, so without the reduction two long
    passwords sharing a prefix would hash identically.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    @staticmethod
    def _prehash(password: str) -> bytes:
        digest = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(digest)

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._prehash(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            password: Plain-text password to check
            password_hash: Bcrypt hash to verify against

        Returns:
            True if the password matches, False otherwise (including when
            the stored hash is not a valid bcrypt string)
        """
        try:
            return bcrypt.checkpw(
                self._prehash(password),
                password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning("password_hash_unreadable", error=str(e))
            return False
