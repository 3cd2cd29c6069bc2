import logging
import os
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

QUOTE_PROVIDERS = {"yahoo", "alpaca"}
SESSION_STORES = {"memory", "redis", "sql"}

_KNOWN_PORTFOLIO_ENV_KEYS = {
    "PORTFOLIO_SESSION_ID",
    "PORTFOLIO_QUOTE_PROVIDER",
    "PORTFOLIO_REFRESH_INTERVAL_SECONDS",
    "PORTFOLIO_SESSION_STORE",
    "PORTFOLIO_SESSION_TTL_SECONDS",
    "PORTFOLIO_SESSION_NAMESPACE",
    "PORTFOLIO_PERFORMER_LIMIT",
}


def _warn_unknown_prefixed_env(prefix: str, known_keys: set[str]) -> None:
    unknown = sorted(key for key in os.environ if key.startswith(prefix) and key not in known_keys)
    if unknown:
        logger.warning("Unknown %s env vars ignored: %s", prefix, ", ".join(unknown))


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    session_id: str = Field(
        default="default",
        validation_alias=AliasChoices("portfolio_session_id", "PORTFOLIO_SESSION_ID", "session_id"),
    )
    quote_provider: str = Field(
        default="yahoo",
        validation_alias=AliasChoices("portfolio_quote_provider", "PORTFOLIO_QUOTE_PROVIDER", "quote_provider"),
    )
    refresh_interval_seconds: int = Field(
        default=900,
        ge=1,
        validation_alias=AliasChoices(
            "portfolio_refresh_interval_seconds", "PORTFOLIO_REFRESH_INTERVAL_SECONDS", "refresh_interval"
        ),
    )
    performer_limit: int = Field(
        default=5,
        ge=0,
        validation_alias=AliasChoices("portfolio_performer_limit", "PORTFOLIO_PERFORMER_LIMIT"),
    )
    session_store: str = Field(
        default="memory",
        validation_alias=AliasChoices("portfolio_session_store", "PORTFOLIO_SESSION_STORE", "session_store"),
    )
    session_ttl_seconds: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("portfolio_session_ttl_seconds", "PORTFOLIO_SESSION_TTL_SECONDS"),
    )
    session_namespace: str = Field(
        default="portfolio",
        validation_alias=AliasChoices("portfolio_session_namespace", "PORTFOLIO_SESSION_NAMESPACE"),
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", validation_alias=AliasChoices("redis_url", "REDIS_URL")
    )
    database_url: str = Field(
        default="sqlite:///./data/portfolio.db",
        validation_alias=AliasChoices("database_url", "DATABASE_URL", "db_url", "sqlite_url"),
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("alpaca_api_key", "ALPACA_API_KEY", "alpaca_api_key_id", "ALPACA_API_KEY_ID"),
    )
    api_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "alpaca_api_secret", "ALPACA_API_SECRET", "alpaca_api_secret_key", "ALPACA_API_SECRET_KEY"
        ),
    )
    data_feed: str = Field(
        default="iex",
        validation_alias=AliasChoices("alpaca_data_feed", "ALPACA_DATA_FEED"),
    )

    @field_validator("quote_provider", "session_store", "data_feed")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("quote_provider")
    @classmethod
    def _validate_quote_provider(cls, value: str) -> str:
        if value not in QUOTE_PROVIDERS:
            raise ValueError(f"quote_provider must be one of {sorted(QUOTE_PROVIDERS)}")
        return value

    @field_validator("session_store")
    @classmethod
    def _validate_session_store(cls, value: str) -> str:
        if value not in SESSION_STORES:
            raise ValueError(f"session_store must be one of {sorted(SESSION_STORES)}")
        return value

    @model_validator(mode="after")
    def _check_provider_credentials(self) -> "Settings":
        if self.quote_provider == "alpaca" and not (self.api_key and self.api_secret):
            raise ValueError("ALPACA_API_KEY and ALPACA_API_SECRET are required for the alpaca quote provider")
        if self.data_feed not in {"iex", "sip"}:
            logger.warning("ALPACA_DATA_FEED=%s is unusual; expected 'iex' or 'sip'", self.data_feed)

        _warn_unknown_prefixed_env("PORTFOLIO_", _KNOWN_PORTFOLIO_ENV_KEYS)
        return self

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Cached accessor so we only load settings once per process."""
    return Settings()
