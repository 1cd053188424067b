"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, UnknownSourceError
from .geocoding import GeocodingConfig, get_geocoding_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .market_data import MarketDataConfig, get_market_data_config
from .sources import MARKET_SOURCES, SourceConfig, get_source_configs
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "MARKET_SOURCES",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "GeocodingConfig",
    "MarketDataConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceConfig",
    "StorageConfig",
    "SyncConfig",
    "UnknownSourceError",
    "configure_logging",
    "get_database_config",
    "get_geocoding_config",
    "get_market_data_config",
    "get_source_configs",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
]
