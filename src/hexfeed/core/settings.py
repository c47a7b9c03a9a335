"""Application settings and configuration.

This module defines all configuration options for the Hexfeed reputation
service. Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Hexfeed Reputation", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./hexfeed.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis backs the reputation summary read-through cache
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Anti-abuse thresholds applied before a reaction is accepted
    reputation_bot_reaction_limit: int = Field(
        default=50,
        alias="REPUTATION_BOT_REACTION_LIMIT",
    )
    reputation_suspicion_window_seconds: int = Field(
        default=3600,
        alias="REPUTATION_SUSPICION_WINDOW_SECONDS",
    )
    reputation_normal_engagement_rate: float = Field(
        default=0.1,
        alias="REPUTATION_NORMAL_ENGAGEMENT_RATE",
    )
    reputation_spike_multiplier: float = Field(
        default=10.0,
        alias="REPUTATION_SPIKE_MULTIPLIER",
    )
    reputation_allow_self_reactions: bool = Field(
        default=True,
        alias="REPUTATION_ALLOW_SELF_REACTIONS",
    )

    # Reputation summary cache
    reputation_cache_enabled: bool = Field(default=True, alias="REPUTATION_CACHE_ENABLED")
    reputation_cache_ttl_seconds: int = Field(
        default=300,
        alias="REPUTATION_CACHE_TTL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def spike_engagement_rate(self) -> float:
        """Return the per-post engagement rate above which a burst is suspicious."""
        return self.reputation_normal_engagement_rate * self.reputation_spike_multiplier


settings = Settings()
