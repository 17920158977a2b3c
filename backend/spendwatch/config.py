"""Configuration settings for the engine."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SPENDWATCH_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Spendwatch Engine"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    # Currency used when a record arrives without one
    default_currency: str = "INR"

    # Upper bound on occurrences generated for one recurring template per call
    max_recurring_catch_up: int = 365


settings = Settings()
