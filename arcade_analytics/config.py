import os
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo


class Settings:
    """Application configuration loaded from environment variables.

    Designed to work nicely with Docker Compose and local development.
    """

    PROJECT_NAME: str = "Arcade Competition Analytics"

    # Database
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "arcade")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "arcade")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "arcade")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    # Full URL override, e.g. sqlite:///./arcade.db for tests.
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")

    # Analytics
    ANALYTICS_TIMEZONE: str = os.getenv("ANALYTICS_TIMEZONE", "UTC")
    LEADERBOARD_LIMIT: int = int(os.getenv("LEADERBOARD_LIMIT", "10"))
    DELTA_LIMIT: int = int(os.getenv("DELTA_LIMIT", "15"))
    TOP_N: int = int(os.getenv("TOP_N", "5"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: Optional[str] = os.getenv("LOG_DIR")

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def timezone(self) -> ZoneInfo:
        """The single zone used for day, hour and month boundaries."""
        return ZoneInfo(self.ANALYTICS_TIMEZONE)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
