"""Application-wide configuration settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from voice_invoice.schemas.commands import Locale


class Settings(BaseSettings):
    """Central settings object loaded from env vars or defaults."""

    match_confidence: float = 0.9
    due_in_days: int = 30
    default_locale: Optional[Locale] = None
    log_level: str = "INFO"
    allowed_origins: List[str] = ["*"]
    api_base_url: str = "http://localhost:8000"
    request_timeout_seconds: int = 30

    model_config = SettingsConfigDict(
        env_prefix="VOICE_INVOICE_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance for dependency injection."""

    return Settings()
