"""Application configuration using Pydantic Settings with YAML support.

This module provides centralized configuration management with:
- YAML-based configuration files organized by domain
- Environment-specific overrides (development, test, production)
- Environment variable loading for secrets
- Caching so settings are parsed once per process
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Dishes API"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 4000


class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1"
    cors_origins: Annotated[list[str], BeforeValidator(parse_list)] = []


class AuthSettings(BaseModel):
    """Credential hashing and bearer token settings."""

    bcrypt_rounds: int = 12
    activation_token_ttl_hours: int = 72
    authentication_token_ttl_minutes: int = 60
    default_permissions: list[str] = ["dishes:read"]

    @property
    def activation_token_ttl(self) -> timedelta:
        """Lifetime of activation tokens."""
        return timedelta(hours=self.activation_token_ttl_hours)

    @property
    def authentication_token_ttl(self) -> timedelta:
        """Lifetime of authentication tokens."""
        return timedelta(minutes=self.authentication_token_ttl_minutes)


class DatabaseSettings(BaseModel):
    """PostgreSQL database configuration settings."""

    host: str = "localhost"
    port: int = 5432
    name: str = "dishes"
    user: str | None = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: float = 30.0  # asyncpg statement ceiling
    query_timeout: float = 3.0  # per repository operation, acquire included
    ssl: bool = False


class RateLimitingSettings(BaseModel):
    """Rate limiting configuration."""

    enabled: bool = True
    storage_uri: str = "memory://"
    default: str = "100/minute"
    auth: str = "5/minute"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class MetricsSettings(BaseModel):
    """Metrics configuration settings."""

    enabled: bool = True


class ObservabilitySettings(BaseModel):
    """Observability configuration settings."""

    metrics: MetricsSettings = MetricsSettings()


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Configuration is loaded from multiple sources with the following priority
    (highest to lowest):
    1. Values passed to Settings()
    2. Environment variables
    3. .env file (secrets only)
    4. YAML files (config/base/ merged with config/environments/{APP_ENV}/)
    5. Default values in code

    Nested values can be overridden with the '__' delimiter, for example
    DATABASE__HOST=db.internal overrides database.host.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    auth: AuthSettings = AuthSettings()
    database: DatabaseSettings = DatabaseSettings()
    rate_limiting: RateLimitingSettings = RateLimitingSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    # Secrets (from environment / .env only - never in YAML)
    DATABASE_PASSWORD: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Put YAML files below environment variables and .env."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def database_url(self) -> str:
        """Build PostgreSQL connection URL without the password.

        URL format: postgresql://[user@]host:port/database
        """
        auth_part = f"{self.database.user}@" if self.database.user else ""
        return (
            f"postgresql://{auth_part}{self.database.host}:"
            f"{self.database.port}/{self.database.name}"
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
