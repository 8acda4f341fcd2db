"""Configuration module for closet-filter."""

from .settings import config, Config, DatabaseConfig, FilterConfig, CacheConfig, AppConfig
from .logging_config import setup_logging, get_logger

__all__ = [
    "config",
    "Config",
    "DatabaseConfig",
    "FilterConfig",
    "CacheConfig",
    "AppConfig",
    "setup_logging",
    "get_logger",
]
