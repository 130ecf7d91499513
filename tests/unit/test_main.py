"""Unit tests for application wiring in create_app."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from conftest import ACCESS_SECRET, REFRESH_SECRET, FakeMediaStore
from tubeauth.config import Settings
from tubeauth.main import create_app
from tubeauth.repositories import InMemoryUserRepository, PostgresUserRepository
from tubeauth.services.media_store import HttpMediaStore


def _settings(**overrides):
    return Settings(
        access_token_secret=ACCESS_SECRET,
        refresh_token_secret=REFRESH_SECRET,
        **overrides,
    )


class TestLifespan:
    """Tests for the startup wiring."""

    def test_postgres_when_url_configured(self):
        pool = AsyncMock()
        with (
            patch(
                "tubeauth.database.create_pool", new_callable=AsyncMock, return_value=pool
            ) as mock_create,
            patch("tubeauth.database.run_migrations", new_callable=AsyncMock) as mock_migrate,
        ):
            app = create_app(
                settings=_settings(postgres_url="postgresql://db/tube", postgres_pool_max_size=4),
                media_store=FakeMediaStore(),
            )
            with TestClient(app):
                service = app.state.auth_service
                assert isinstance(service.repository, PostgresUserRepository)
                pool.close.assert_not_awaited()

        assert mock_create.call_args[0][0] == "postgresql://db/tube"
        assert mock_create.call_args.kwargs["max_size"] == 4
        mock_migrate.assert_awaited_once_with(pool)
        pool.close.assert_awaited_once()

    def test_in_memory_without_url(self):
        app = create_app(settings=_settings(), media_store=FakeMediaStore())
        with TestClient(app):
            assert isinstance(app.state.auth_service.repository, InMemoryUserRepository)

    def test_default_media_store(self):
        app = create_app(
            settings=_settings(media_upload_url="https://media.example.com/upload"),
            repository=InMemoryUserRepository(),
        )
        with TestClient(app):
            media = app.state.auth_service.media_store
            assert isinstance(media, HttpMediaStore)
            assert media.upload_url == "https://media.example.com/upload"

    def test_session_policy_flags_reach_services(self):
        app = create_app(
            settings=_settings(
                revoke_session_on_reuse=True,
                revoke_sessions_on_password_change=True,
            ),
            repository=InMemoryUserRepository(),
            media_store=FakeMediaStore(),
        )
        with TestClient(app):
            service = app.state.auth_service
            assert service.sessions.revoke_on_reuse is True
            assert service.revoke_sessions_on_password_change is True

    def test_correlation_id_generated(self):
        app = create_app(
            settings=_settings(),
            repository=InMemoryUserRepository(),
            media_store=FakeMediaStore(),
        )
        with TestClient(app) as client:
            response = client.get("/api/v1/users/current-user")

        assert response.status_code == 401
        assert response.headers["X-Correlation-Id"] == response.json()["correlation_id"]
