# inkstudio/config.py

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "inkstudio booking"

    # Database
    DATABASE_URL: str = "sqlite:///./studio.db"
    SQL_ECHO: bool = False  # set to True to see SQL

    # Security
    JWT_SECRET: str = "change-me-later"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Slot computation
    SLOT_STEP_MINUTES: int = 30
    BOOKING_HORIZON_DAYS: int = 90
    # "all" keeps every grid start, "distinct" keeps only non-overlapping slots
    SLOT_OVERLAP_POLICY: Literal["all", "distinct"] = "all"
    # Date overrides: apply blocks first, then extensions (extensions win)
    EXTENSIONS_OVERRIDE_BLOCKS: bool = True

    # Record fetches
    FETCH_TIMEOUT_SECONDS: float = 5.0
    FETCH_RETRY_ATTEMPTS: int = 1

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )


settings = Settings()
