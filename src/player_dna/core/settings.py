"""Application settings and configuration.

This module defines all configuration options for the Player DNA registry.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Player DNA Registry", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./player_dna.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    auth_challenge_ttl_seconds: int = Field(default=300, alias="AUTH_CHALLENGE_TTL_SECONDS")

    # Registry bootstrap configuration (applied once, on first initialization)
    registry_identity: str = Field(default="player-dna-registry", alias="REGISTRY_IDENTITY")
    registry_owner: str | None = Field(default=None, alias="REGISTRY_OWNER")
    registry_providers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        alias="REGISTRY_PROVIDERS",
    )
    submission_cooldown_seconds: int = Field(default=30, ge=0, alias="SUBMISSION_COOLDOWN_SECONDS")
    decryption_cooldown_seconds: int = Field(default=60, ge=0, alias="DECRYPTION_COOLDOWN_SECONDS")

    # Decryption oracle
    oracle_public_key: str | None = Field(default=None, alias="ORACLE_PUBLIC_KEY")
    oracle_signing_key: str | None = Field(default=None, alias="ORACLE_SIGNING_KEY")
    oracle_relay_enabled: bool = Field(default=False, alias="ORACLE_RELAY_ENABLED")
    oracle_relay_interval_seconds: float = Field(
        default=2.0,
        alias="ORACLE_RELAY_INTERVAL_SECONDS",
    )
    oracle_relay_batch_size: int = Field(default=25, alias="ORACLE_RELAY_BATCH_SIZE")

    # Player type classification of decrypted results
    player_type_bucket_width: int = Field(default=15, ge=1, alias="PLAYER_TYPE_BUCKET_WIDTH")

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

    @field_validator("registry_providers", mode="before")
    @classmethod
    def _split_providers(cls, value: object) -> object:
        """Accept a comma separated provider list from the environment."""
        if isinstance(value, str):
            return [item.strip().lower() for item in value.split(",") if item.strip()]
        return value

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
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


settings = Settings()  # type: ignore[call-arg]
