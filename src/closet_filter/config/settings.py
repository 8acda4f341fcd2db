"""Application settings and configuration."""

from pathlib import Path
from dataclasses import dataclass, field
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Data lives next to wherever the process is started from
PROJECT_ROOT = Path.cwd()


@dataclass
class DatabaseConfig:
    """Database configuration settings."""

    path: Path = field(
        default_factory=lambda: Path(
            os.getenv("CLOSET_DB_PATH", str(PROJECT_ROOT / "data" / "closet.duckdb"))
        )
    )
    read_only: bool = field(
        default_factory=lambda: os.getenv("CLOSET_DB_READ_ONLY", "false").lower() == "true"
    )
    memory_limit: str = field(
        default_factory=lambda: os.getenv("CLOSET_DB_MEMORY_LIMIT", "1GB")
    )
    threads: int = -1  # Use all available threads


@dataclass
class FilterConfig:
    """Filter and search behaviour settings."""

    debounce_ms: int = field(
        default_factory=lambda: int(os.getenv("CLOSET_SEARCH_DEBOUNCE_MS", "300"))
    )
    default_page_size: int = field(
        default_factory=lambda: int(os.getenv("CLOSET_DEFAULT_PAGE_SIZE", "20"))
    )
    max_page_size: int = field(
        default_factory=lambda: int(os.getenv("CLOSET_MAX_PAGE_SIZE", "500"))
    )

    @property
    def debounce_seconds(self) -> float:
        """Debounce window expressed in seconds."""
        return self.debounce_ms / 1000.0


@dataclass
class CacheConfig:
    """Search result cache settings."""

    enabled: bool = field(
        default_factory=lambda: os.getenv("CLOSET_CACHE_ENABLED", "true").lower() == "true"
    )
    maxsize: int = 64
    ttl: int = field(
        default_factory=lambda: int(os.getenv("CLOSET_CACHE_TTL_SECONDS", "300"))
    )


@dataclass
class AppConfig:
    """Application configuration settings."""

    name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Closet Filter"))
    version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    snapshot_path: Path = field(
        default_factory=lambda: Path(
            os.getenv(
                "CLOSET_SNAPSHOT_PATH",
                str(PROJECT_ROOT / "data" / "filter_state.json"),
            )
        )
    )


@dataclass
class Config:
    """Main configuration container."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    app: AppConfig = field(default_factory=AppConfig)

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.database.path.parent.mkdir(parents=True, exist_ok=True)
        self.app.snapshot_path.parent.mkdir(parents=True, exist_ok=True)


# Global config instance
config = Config()
