"""Application configuration loader.

Loads configuration from data/config/pathways_config_v1.yaml with fallback
to built-in defaults. PATHWAYS_DB_PATH and PATHWAYS_EXPORTS_DIR override
the store path and the exports directory.

Usage:
    from pathways.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.store.db_path
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/pathways_config_v1.yaml")

# Exports live next to the installed package unless configured otherwise
PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_EXPORTS_DIR = PACKAGE_DIR / "exports"

DB_PATH_ENV = "PATHWAYS_DB_PATH"
EXPORTS_DIR_ENV = "PATHWAYS_EXPORTS_DIR"

SUPPORTED_FORMATS = ("json", "csv")


@dataclass
class StoreConfig:
    """Configuration for the SQLite store."""

    db_path: Path = Path("data/pathways.db")
    timeout_seconds: float = 5.0


@dataclass
class ExportConfig:
    """Configuration for export artifacts."""

    output_dir: Path = DEFAULT_EXPORTS_DIR
    default_format: str = "json"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "store": {
            "db_path": "data/pathways.db",
            "timeout_seconds": 5.0,
        },
        "export": {
            "output_dir": None,
            "default_format": "json",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    store_data = data.get("store") or {}
    store = StoreConfig(
        db_path=Path(store_data.get("db_path") or "data/pathways.db"),
        timeout_seconds=float(store_data.get("timeout_seconds", 5.0)),
    )

    export_data = data.get("export") or {}
    output_dir = export_data.get("output_dir")
    default_format = export_data.get("default_format", "json")
    if default_format not in SUPPORTED_FORMATS:
        logger.warning("config.unknown_format", default_format=default_format)
        default_format = "json"

    export = ExportConfig(
        output_dir=Path(output_dir) if output_dir else DEFAULT_EXPORTS_DIR,
        default_format=default_format,
    )

    return AppConfig(store=store, export=export)


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    if db_path := os.environ.get(DB_PATH_ENV):
        config.store.db_path = Path(db_path)
    if exports_dir := os.environ.get(EXPORTS_DIR_ENV):
        config.export.output_dir = Path(exports_dir)
    return config


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _apply_env_overrides(_parse_config(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
