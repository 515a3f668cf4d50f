"""
Application Configuration using Pydantic Settings.

Loads configuration from environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Loan Approval Demo API")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")

    # Vote model
    vote_estimators: int = Field(default=10, ge=1)
    # Fixed seed makes vote scoring reproducible; unset draws fresh seeds per request
    vote_random_state: Optional[int] = Field(default=None)

    # Evaluation
    evaluation_sample_size: int = Field(default=1000, ge=0)
    max_evaluation_sample_size: int = Field(default=10000, ge=0)

    # Request limits
    max_synthetic_count: int = Field(default=1000, ge=1)
    max_batch_size: int = Field(default=100, ge=1)

    # Forecast
    forecast_delay_seconds: float = Field(default=0.0, ge=0)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
