"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tubeauth import database
from tubeauth.api.auth import router as auth_router
from tubeauth.api.errors import register_exception_handlers
from tubeauth.api.middleware import CorrelationIdMiddleware
from tubeauth.config import Settings, get_settings
from tubeauth.repositories import InMemoryUserRepository, PostgresUserRepository, UserRepository
from tubeauth.services.auth_service import AuthService
from tubeauth.services.logging_service import configure_logging, get_logger
from tubeauth.services.media_store import HttpMediaStore, MediaStore


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[UserRepository] = None,
    media_store: Optional[MediaStore] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; defaults to get_settings()
        repository: User repository; defaults to Postgres when postgres_url
            is set, otherwise an in-memory store
        media_store: Upload client; defaults to HttpMediaStore
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire the auth service on startup, release the pool on shutdown."""
        configure_logging(settings.log_level)
        logger = get_logger("main")

        repo = repository
        pool = None
        if repo is None and settings.postgres_url:
            pool = await database.create_pool(
                settings.postgres_url,
                min_size=settings.postgres_pool_min_size,
                max_size=settings.postgres_pool_max_size,
            )
            await database.run_migrations(pool)
            repo = PostgresUserRepository(pool)
            logger.info("database_initialized")
        elif repo is None:
            repo = InMemoryUserRepository()
            logger.warning(
                "in_memory_repository",
                note="POSTGRES_URL not set - users are lost on restart",
            )

        media = media_store
        if media is None:
            if not settings.media_upload_url:
                logger.warning(
                    "media_upload_url_missing",
                    note="Registration will fail until MEDIA_UPLOAD_URL is set",
                )
            media = HttpMediaStore(
                upload_url=settings.media_upload_url,
                api_key=settings.media_api_key,
                timeout_seconds=settings.media_timeout_seconds,
            )

        app.state.settings = settings
        app.state.auth_service = AuthService.from_settings(settings, repo, media)

        logger.info(
            "application_started",
            log_level=settings.log_level,
            revoke_session_on_reuse=settings.revoke_session_on_reuse,
        )

        yield

        if pool is not None:
            await pool.close()
            logger.info("database_pool_closed")

        logger.info("application_shutdown")

    app = FastAPI(
        title="TubeAuth - Session API",
        description="Registration, login and refresh-token rotation for the video platform",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(auth_router)

    return app


app = create_app()
