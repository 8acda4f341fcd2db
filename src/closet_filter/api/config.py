"""FastAPI application settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from closet_filter.config import config


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_prefix="CLOSET_")

    # App info
    app_name: str = "Closet Filter API"
    version: str = config.app.version
    debug: bool = False

    # Database (":memory:" for a throwaway store)
    database_path: Path = config.database.path

    # Comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Pagination
    default_page_size: int = config.filters.default_page_size
    max_page_size: int = config.filters.max_page_size

    # Filter state persistence between restarts
    persist_filter_state: bool = True
    snapshot_path: Optional[Path] = None

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
