"""Configuration loading."""

from .settings import (
    DEFAULT_BACKFILL_START,
    EARLIEST_TIME,
    MAINNET_API_URL,
    TESTNET_API_URL,
    ConfigError,
    Settings,
    load_env_file,
    load_settings,
)

__all__ = [
    "DEFAULT_BACKFILL_START",
    "EARLIEST_TIME",
    "MAINNET_API_URL",
    "TESTNET_API_URL",
    "ConfigError",
    "Settings",
    "load_env_file",
    "load_settings",
]
