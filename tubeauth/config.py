"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Tokens
    access_token_secret: str = "change-me-access-secret-in-production"
    access_token_expire_minutes: int = 15
    refresh_token_secret: str = "change-me-refresh-secret-in-production"
    refresh_token_expire_days: int = 10
    jwt_algorithm: str = "HS256"

    # Password hashing
    bcrypt_rounds: int = 12

    # Session policy
    revoke_session_on_reuse: bool = False  # Hardened replay response
    revoke_sessions_on_password_change: bool = False

    # Logging
    log_level: str = "INFO"

    # Database (empty means in-memory repository)
    postgres_url: str = ""
    postgres_pool_min_size: int = 2
    postgres_pool_max_size: int = 10

    # Media upload
    media_upload_url: str = ""
    media_api_key: str = ""
    media_timeout_seconds: int = 30
    upload_temp_dir: str = "./public/temp"

    # Cookies / CORS
    cookie_secure: bool = True
    cookie_samesite: str = "strict"
    cors_allow_origins: str = "*"

    @property
    def cors_allow_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
