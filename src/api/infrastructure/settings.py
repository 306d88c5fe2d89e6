"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        FLEETGATE_DB_HOST: Database host (default: localhost)
        FLEETGATE_DB_PORT: Database port (default: 5432)
        FLEETGATE_DB_DATABASE: Database name (default: fleetgate)
        FLEETGATE_DB_USERNAME: Database user (default: fleetgate)
        FLEETGATE_DB_PASSWORD: Database password (required in production)
        FLEETGATE_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        FLEETGATE_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLEETGATE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="fleetgate", description="Database name")
    username: str = Field(default="fleetgate", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuthorizationSettings(BaseSettings):
    """Authorization service, permission cache and data sync settings.

    Environment variables:
        FLEETGATE_AUTHZ_ENABLED: Bootstrap the schema at startup (default: true)
        FLEETGATE_AUTHZ_ENDPOINT: SpiceDB gRPC endpoint (default: localhost:50051)
        FLEETGATE_AUTHZ_API_KEY: SpiceDB pre-shared key
        FLEETGATE_AUTHZ_USE_TLS: Use TLS for the gRPC channel (default: false)
        FLEETGATE_AUTHZ_TIMEOUT_SECONDS: Per-call deadline (default: 5.0)
        FLEETGATE_AUTHZ_CACHE_TTL_SECONDS: Cached answer lifetime (default: 300)
        FLEETGATE_AUTHZ_CACHE_MAX_ENTRIES: Cache capacity (default: 10000)
        FLEETGATE_AUTHZ_INVALIDATE_SUBJECTS: Also invalidate by subject on
            writes (default: false)
        FLEETGATE_AUTHZ_MAX_CONCURRENT_CHECKS: Batch check fan-out (default: 20)
        FLEETGATE_AUTHZ_RETRY_MAX_ATTEMPTS: Sync retries after the first
            attempt (default: 3)
        FLEETGATE_AUTHZ_RETRY_BASE_DELAY_SECONDS: Linear backoff step (default: 1.0)
        FLEETGATE_AUTHZ_BOOTSTRAP_SYSTEM_ADMIN_ID: User granted system admin
            at startup (optional)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLEETGATE_AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Bootstrap the authorization schema at startup",
    )
    endpoint: str = Field(
        default="localhost:50051",
        description="SpiceDB gRPC endpoint",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="SpiceDB pre-shared key",
    )
    use_tls: bool = Field(default=False, description="Use TLS for SpiceDB")
    timeout_seconds: float = Field(
        default=5.0,
        description="Deadline applied to every SpiceDB call",
        gt=0,
    )
    cache_ttl_seconds: float = Field(
        default=300.0,
        description="Lifetime of a cached permission answer",
    )
    cache_max_entries: int = Field(
        default=10_000,
        description="Maximum number of cached permission answers",
    )
    invalidate_subjects: bool = Field(
        default=False,
        description="Invalidate cached answers of users named in changed tuples",
    )
    max_concurrent_checks: int = Field(
        default=20,
        description="Upper bound on concurrent backend checks per batch",
        ge=1,
    )
    retry_max_attempts: int = Field(
        default=3,
        description="Sync retries after the first attempt",
    )
    retry_base_delay_seconds: float = Field(
        default=1.0,
        description="Linear backoff step between sync retries",
    )
    bootstrap_system_admin_id: str | None = Field(
        default=None,
        description="User granted system admin at startup",
    )

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("cache_ttl_seconds must be positive")
        return value

    @field_validator("cache_max_entries")
    @classmethod
    def validate_cache_max_entries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("cache_max_entries must be at least 1")
        return value

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_retry_max_attempts(cls, value: int) -> int:
        if value < 0:
            raise ValueError("retry_max_attempts must not be negative")
        return value

    @field_validator("retry_base_delay_seconds")
    @classmethod
    def validate_retry_base_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("retry_base_delay_seconds must not be negative")
        return value


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="FLEETGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Minimum log level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache
def get_authorization_settings() -> AuthorizationSettings:
    """Get cached authorization settings."""
    return AuthorizationSettings()
