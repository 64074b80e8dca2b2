"""Application settings and configuration.

This module defines all configuration options for the Quillpost application.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quillpost.schemas.user import AuthorizedUser


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Quillpost", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    session_cookie_name: str = Field(default="auth-token", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=True, alias="SESSION_COOKIE_SECURE")

    # Static allow-list; JSON list of {"email", "roles", "name"} objects
    authorized_users: list[AuthorizedUser] = Field(
        default_factory=list,
        alias="AUTHORIZED_USERS",
    )

    # Document storage
    storage_backend: Literal["sql", "cosmos"] = Field(default="sql", alias="STORAGE_BACKEND")
    database_url: str = Field(default="sqlite:///./quillpost.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    cosmos_endpoint: str | None = Field(default=None, alias="COSMOS_ENDPOINT")
    cosmos_key: str | None = Field(default=None, alias="COSMOS_KEY")
    cosmos_database: str = Field(default="quillpost-blog", alias="COSMOS_DATABASE")
    cosmos_container_posts: str = Field(default="posts", alias="COSMOS_CONTAINER_POSTS")
    cosmos_container_comments: str = Field(
        default="comments",
        alias="COSMOS_CONTAINER_COMMENTS",
    )
    cosmos_container_pages: str = Field(default="pages", alias="COSMOS_CONTAINER_PAGES")

    # Rate limiting
    rate_limit_backend: Literal["memory", "redis"] = Field(
        default="memory",
        alias="RATE_LIMIT_BACKEND",
    )
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    rate_limit_read_window_seconds: float = Field(
        default=15 * 60, alias="RATE_LIMIT_READ_WINDOW_SECONDS"
    )
    rate_limit_read_max: int = Field(default=100, alias="RATE_LIMIT_READ_MAX")
    rate_limit_auth_window_seconds: float = Field(
        default=15 * 60, alias="RATE_LIMIT_AUTH_WINDOW_SECONDS"
    )
    rate_limit_auth_max: int = Field(default=5, alias="RATE_LIMIT_AUTH_MAX")
    rate_limit_write_window_seconds: float = Field(
        default=60, alias="RATE_LIMIT_WRITE_WINDOW_SECONDS"
    )
    rate_limit_write_max: int = Field(default=10, alias="RATE_LIMIT_WRITE_MAX")
    rate_limit_sweep_interval_seconds: float = Field(
        default=5 * 60, alias="RATE_LIMIT_SWEEP_INTERVAL_SECONDS"
    )
    # Honor X-Forwarded-For / X-Real-IP only behind a proxy that overwrites them.
    rate_limit_trust_proxy_headers: bool = Field(
        default=True,
        alias="RATE_LIMIT_TRUST_PROXY_HEADERS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def cosmos_containers(self) -> dict[str, str]:
        """Map logical container names to their configured Cosmos ids."""
        return {
            "posts": self.cosmos_container_posts,
            "comments": self.cosmos_container_comments,
            "pages": self.cosmos_container_pages,
        }


settings = Settings()  # type: ignore[call-arg]
