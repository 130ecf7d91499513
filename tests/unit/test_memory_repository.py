"""Unit tests for InMemoryUserRepository."""

import asyncio
from uuid import uuid4

import pytest

from tubeauth.repositories.base import DuplicateUserError


async def _create(repository, username="janedoe", email="jane@x.com"):
    return await repository.create_user(
        username=username,
        email=email,
        full_name="Jane Doe",
        avatar_url="https://media.test/a.png",
        cover_image_url="",
        password_hash="hash",
    )


class TestCreateAndFind:
    """Tests for create_user and the lookups."""

    async def test_create_assigns_id_and_timestamps(self, repository):
        user = await _create(repository)
        assert user.id is not None
        assert user.created_at == user.updated_at
        assert user.current_refresh_token is None

    async def test_duplicate_username_rejected(self, repository):
        await _create(repository)
        with pytest.raises(DuplicateUserError):
            await _create(repository, email="other@x.com")

    async def test_duplicate_email_rejected(self, repository):
        await _create(repository)
        with pytest.raises(DuplicateUserError):
            await _create(repository, username="other")

    async def test_find_by_identifier_prefers_username(self, repository):
        by_email = await _create(repository, username="alice", email="bob")
        by_name = await _create(repository, username="bob", email="bob@x.com")

        found = await repository.find_by_identifier("BOB")

        assert found.id == by_name.id
        assert found.id != by_email.id

    async def test_returned_records_are_copies(self, repository):
        user = await _create(repository)
        user.current_refresh_token = "tampered"
        assert (await repository.get_by_id(user.id)).current_refresh_token is None

    async def test_get_unknown(self, repository):
        assert await repository.get_by_id(uuid4()) is None


class TestRefreshTokenWrites:
    """Tests for set_refresh_token and compare_and_set_refresh_token."""

    async def test_set_and_clear(self, repository):
        user = await _create(repository)
        assert await repository.set_refresh_token(user.id, "t1") is True
        assert (await repository.get_by_id(user.id)).current_refresh_token == "t1"
        assert await repository.set_refresh_token(user.id, None) is True
        assert (await repository.get_by_id(user.id)).current_refresh_token is None

    async def test_set_unknown_user(self, repository):
        assert await repository.set_refresh_token(uuid4(), "t1") is False

    async def test_cas_swaps_on_match(self, repository):
        user = await _create(repository)
        await repository.set_refresh_token(user.id, "t1")

        assert await repository.compare_and_set_refresh_token(user.id, "t1", "t2") is True
        assert (await repository.get_by_id(user.id)).current_refresh_token == "t2"

    async def test_cas_refuses_on_mismatch(self, repository):
        user = await _create(repository)
        await repository.set_refresh_token(user.id, "t2")

        assert await repository.compare_and_set_refresh_token(user.id, "t1", "t3") is False
        assert (await repository.get_by_id(user.id)).current_refresh_token == "t2"

    async def test_cas_single_winner_under_contention(self, repository):
        user = await _create(repository)
        await repository.set_refresh_token(user.id, "t1")

        outcomes = await asyncio.gather(
            *(repository.compare_and_set_refresh_token(user.id, "t1", f"n{i}") for i in range(10))
        )

        assert outcomes.count(True) == 1

    async def test_update_password_bumps_updated_at(self, repository):
        user = await _create(repository)
        assert await repository.update_password(user.id, "new-hash") is True
        stored = await repository.get_by_id(user.id)
        assert stored.password_hash == "new-hash"
        assert stored.updated_at >= user.updated_at
