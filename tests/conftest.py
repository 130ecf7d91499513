"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Optional, Set

import pytest

from tubeauth.models.auth import RegisterInput
from tubeauth.repositories.memory import InMemoryUserRepository
from tubeauth.services.auth_service import AuthService
from tubeauth.services.media_store import MediaAsset
from tubeauth.services.password_hasher import PasswordHasher
from tubeauth.services.session_manager import SessionManager
from tubeauth.services.token_issuer import TokenIssuer

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123456789"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012345678"

# Minimum bcrypt cost keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


class FakeMediaStore:
    """MediaStore double that records uploads and can be told to fail."""

    def __init__(self):
        self.uploaded: list[str] = []
        self.failing: Set[str] = set()

    async def upload(self, local_path: Optional[str]) -> Optional[MediaAsset]:
        if not local_path:
            return None
        if local_path in self.failing:
            return None
        self.uploaded.append(local_path)
        name = Path(local_path).name
        return MediaAsset(url=f"https://media.test/{name}", public_id=name)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def session_manager(repository, token_issuer) -> SessionManager:
    return SessionManager(repository, token_issuer)


@pytest.fixture
def auth_service(repository, media_store, password_hasher, token_issuer) -> AuthService:
    return AuthService(
        repository=repository,
        media_store=media_store,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
    )


def jane_input(**overrides) -> RegisterInput:
    """Registration payload for the reference user."""
    data = {
        "full_name": "Jane Doe",
        "email": "jane@x.com",
        "username": "janedoe",
        "password": "Secret123!",
        "avatar_path": "/tmp/uploads/jane-avatar.png",
        "cover_image_path": None,
    }
    data.update(overrides)
    return RegisterInput(**data)


@pytest.fixture
def register_input():
    """Factory for registration payloads; keyword overrides replace fields."""
    return jane_input


@pytest.fixture
async def jane(auth_service):
    """Jane, registered through the facade."""
    result = await auth_service.register(jane_input())
    assert result.ok, result.error
    return result.value
