from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging settings
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "WARNING"

    # Dispute policy. Defaults replay the log without any extra guards.
    require_matching_client: bool = False
    allow_repeat_dispute: bool = True
    freeze_locked_accounts: bool = False
    # Which account a dispute, resolve or chargeback moves funds on when the
    # row's client differs from the client of the referenced transaction
    dispute_target: Literal["record_owner", "row_client"] = "record_owner"

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
