"""Services package exports."""

from tubeauth.services.auth_service import AuthService
from tubeauth.services.credential_verifier import CredentialVerifier
from tubeauth.services.logging_service import configure_logging, get_logger
from tubeauth.services.media_store import HttpMediaStore, MediaAsset, MediaStore
from tubeauth.services.password_hasher import PasswordHasher
from tubeauth.services.session_manager import SessionManager
from tubeauth.services.session_store import SessionStore
from tubeauth.services.token_issuer import TokenIssuer

__all__ = [
    "AuthService",
    "CredentialVerifier",
    "HttpMediaStore",
    "MediaAsset",
    "MediaStore",
    "PasswordHasher",
    "SessionManager",
    "SessionStore",
    "TokenIssuer",
    "configure_logging",
    "get_logger",
]
