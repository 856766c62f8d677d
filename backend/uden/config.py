"""Application Configuration — TOML file + environment settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single frozen instance per process
    - A missing config file is not an error: every field has a documented default
    - Environment variables override the file (nested keys use "__", e.g. STRIPE__SECRET_API_KEY)

Design Decisions:
    - Section layout mirrors config/config.toml (oidc_providers, ai, postgres, s3, stripe)
    - OAuth client credentials are NOT configured here: providers are user-chosen
      instances and their parameters arrive with each login request
"""

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONFIG_FILE = "config/config.toml"


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class AISettings(_Section):
    base_url: str = ""
    model: str = ""
    models: list[str] = []


class PostgresSettings(_Section):
    host: str = ""
    port: int = 0
    username: str = ""
    password: str = ""


class S3Settings(_Section):
    access_key: str = ""
    bucket_name: str = ""
    endpoint: str = ""
    public_url: str = ""
    secret_access_key: str = ""


class StripeProducts(_Section):
    premium: str = ""


class StripeSettings(_Section):
    products: StripeProducts = StripeProducts()
    public_api_key: str = ""
    secret_api_key: str = ""
    webhook_secret: str = ""


class EmailSettings(_Section):
    """Verification mail relay (Resend)."""
    api_key: str = ""
    from_address: str = "noreply@uden.ai"
    from_name: str = "Uden AI"


class OAuthSettings(_Section):
    timeout_seconds: float = 10.0


class BillingSettings(_Section):
    require_verified_email: bool = True
    gateway_timeout_seconds: float = 30.0


class Settings(BaseSettings):
    """Process-wide settings. Read once at startup, never mutated."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Database
    database_url: str = "postgresql+asyncpg://uden:uden@db:5432/uden"
    database_pool_size: int = 20
    database_max_overflow: int = 10

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    oidc_providers: list[dict[str, str]] = []
    ai: AISettings = AISettings()
    postgres: PostgresSettings = PostgresSettings()
    s3: S3Settings = S3Settings()
    stripe: StripeSettings = StripeSettings()
    email: EmailSettings = EmailSettings()
    oauth: OAuthSettings = OAuthSettings()
    billing: BillingSettings = BillingSettings()

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_file = os.environ.get("UDEN_CONFIG_FILE", DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            file_secret_settings,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
