"""Configuration package for pathway exports."""

from pathways.config.app_config import (
    AppConfig,
    ExportConfig,
    StoreConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ExportConfig",
    "StoreConfig",
    "clear_config_cache",
    "load_app_config",
]
