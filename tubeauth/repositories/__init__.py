"""Repository package exports."""

from tubeauth.repositories.base import DuplicateUserError, UserRepository
from tubeauth.repositories.memory import InMemoryUserRepository
from tubeauth.repositories.postgres import PostgresUserRepository

__all__ = [
    "DuplicateUserError",
    "InMemoryUserRepository",
    "PostgresUserRepository",
    "UserRepository",
]
