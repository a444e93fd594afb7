from __future__ import annotations

"""Environment-driven settings for the productlink service."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from ``PRODUCTLINK_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PRODUCTLINK_", env_file=".env", case_sensitive=False
    )

    # Links
    public_base_url: str = ""
    token_budget: int = Field(14_000, ge=1)
    url_length_ceiling: int = Field(16_000, ge=1)

    # Storage
    storage_backend: Literal["memory", "cloudflare"] = "memory"
    cloudflare_account_id: Optional[str] = None
    cloudflare_namespace_id: Optional[str] = None
    cloudflare_api_token: Optional[str] = None
    cloudflare_api_base: str = "https://api.cloudflare.com/client/v4"
    store_timeout_seconds: float = 10.0
    payload_ttl_seconds: Optional[int] = Field(default=None, ge=60)
    canonicalize_keys: bool = False
    read_retries: int = Field(0, ge=0)
    read_retry_delay_seconds: float = Field(0.25, ge=0)

    # Responses
    cache_max_age_seconds: int = 3600

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("public_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.rstrip("/")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
