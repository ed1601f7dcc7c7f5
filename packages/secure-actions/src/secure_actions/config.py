"""Configuration for secure actions."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .credentials import MIN_ROUNDS, MIN_SECRET_LENGTH


class Settings(BaseSettings):
    """Settings read from ``SECURE_ACTIONS_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="SECURE_ACTIONS_", extra="ignore")

    db_path: str = ":memory:"
    secret_length: int = Field(default=MIN_SECRET_LENGTH, ge=MIN_SECRET_LENGTH)
    bcrypt_rounds: int = Field(default=10, ge=MIN_ROUNDS, le=31)
    # Conditional increments: never let the count pass the limit
    strict_limits: bool = True
    sweep_batch_size: int = Field(default=500, ge=1)
    # Cadence for the host's scheduler; the sweeper itself never sleeps
    sweep_interval_seconds: int = Field(default=86400, ge=1)
    token_query_param: str = "secure_action"


@lru_cache
def get_settings() -> Settings:
    return Settings()
