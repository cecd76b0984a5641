"""
Runtime configuration management.

This module handles loading and accessing ledger-sync configuration from
multiple sources with a clear priority order:

    1. Environment variables (highest priority) - for service deployments
    2. Config file (config/sync.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The SyncConfig
dataclass provides typed access to all settings.

Usage:
    from ledger_sync.config import config

    print(config.ledger.absolute_path)
    print(config.store.backend)

Environment Variable Mapping:
    LEDGER_SYNC_FILE           -> ledger.path
    LEDGER_SYNC_READ_ATTEMPTS  -> ledger.read_attempts
    LEDGER_SYNC_READ_DELAY     -> ledger.read_delay_seconds
    LEDGER_SYNC_STORE          -> store.backend
    LEDGER_SYNC_DB_PATH        -> store.sqlite_path
    LEDGER_SYNC_STORE_URL      -> store.http_base_url
    LEDGER_SYNC_LOG_LEVEL      -> logging.level
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "sync.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "sync.example.ini"


def _resolve(path: str) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    return PROJECT_ROOT / p


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class LedgerSettings:
    """Ledger file location and read retry policy."""

    path: str = "data/ledger.txt"
    read_attempts: int = 3
    read_delay_seconds: float = 5.0

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to the ledger file."""
        return _resolve(self.path)


@dataclass
class StoreSettings:
    """Record store backend configuration."""

    backend: Literal["sqlite", "http"] = "sqlite"
    sqlite_path: str = "data/records.db"
    table: str = "records"
    id_column: str = "id"
    payload_column: str = "payload"
    connect_attempts: int = 3
    connect_delay_seconds: float = 1.0
    http_base_url: str = "http://localhost:8000"
    http_timeout_seconds: int = 30

    @property
    def absolute_sqlite_path(self) -> Path:
        """Get absolute path to the SQLite record store."""
        return _resolve(self.sqlite_path)


@dataclass
class WatcherSettings:
    """File watcher behaviour."""

    debounce_seconds: float = 0.5
    run_on_start: bool = True


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed", "json"] = "detailed"


@dataclass
class SyncConfig:
    """
    Complete ledger-sync configuration.

    This is the main configuration object that aggregates all settings sections.
    Access via the module-level `config` singleton.
    """

    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    store: StoreSettings = field(default_factory=StoreSettings)
    watcher: WatcherSettings = field(default_factory=WatcherSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: SyncConfig) -> None:
    """Load configuration from parsed INI file into SyncConfig."""
    # Ledger section
    if parser.has_section("ledger"):
        if parser.has_option("ledger", "path"):
            cfg.ledger.path = parser.get("ledger", "path")
        if parser.has_option("ledger", "read_attempts"):
            cfg.ledger.read_attempts = parser.getint("ledger", "read_attempts")
        if parser.has_option("ledger", "read_delay_seconds"):
            cfg.ledger.read_delay_seconds = parser.getfloat("ledger", "read_delay_seconds")

    # Store section
    if parser.has_section("store"):
        if parser.has_option("store", "backend"):
            val = parser.get("store", "backend").lower()
            if val in ("sqlite", "http"):
                cfg.store.backend = val  # type: ignore[assignment]
        for key in ("sqlite_path", "table", "id_column", "payload_column", "http_base_url"):
            if parser.has_option("store", key):
                setattr(cfg.store, key, parser.get("store", key))
        if parser.has_option("store", "connect_attempts"):
            cfg.store.connect_attempts = parser.getint("store", "connect_attempts")
        if parser.has_option("store", "connect_delay_seconds"):
            cfg.store.connect_delay_seconds = parser.getfloat("store", "connect_delay_seconds")
        if parser.has_option("store", "http_timeout_seconds"):
            cfg.store.http_timeout_seconds = parser.getint("store", "http_timeout_seconds")

    # Watcher section
    if parser.has_section("watcher"):
        if parser.has_option("watcher", "debounce_seconds"):
            cfg.watcher.debounce_seconds = parser.getfloat("watcher", "debounce_seconds")
        if parser.has_option("watcher", "run_on_start"):
            cfg.watcher.run_on_start = _parse_bool(parser.get("watcher", "run_on_start"))

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed", "json"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: SyncConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Ledger settings
    if env_file := os.getenv("LEDGER_SYNC_FILE"):
        cfg.ledger.path = env_file
    if env_attempts := os.getenv("LEDGER_SYNC_READ_ATTEMPTS"):
        cfg.ledger.read_attempts = int(env_attempts)
    if env_delay := os.getenv("LEDGER_SYNC_READ_DELAY"):
        cfg.ledger.read_delay_seconds = float(env_delay)

    # Store settings
    if env_store := os.getenv("LEDGER_SYNC_STORE"):
        if env_store.lower() in ("sqlite", "http"):
            cfg.store.backend = env_store.lower()  # type: ignore[assignment]
    if env_db := os.getenv("LEDGER_SYNC_DB_PATH"):
        cfg.store.sqlite_path = env_db
    if env_url := os.getenv("LEDGER_SYNC_STORE_URL"):
        cfg.store.http_base_url = env_url

    # Logging settings
    if env_log := os.getenv("LEDGER_SYNC_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> SyncConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/sync.ini
        3. config/sync.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        SyncConfig: Fully populated configuration object.
    """
    cfg = SyncConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "SyncConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton. A running watcher keeps
    the settings it was started with.

    Returns:
        SyncConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

# Load configuration once at module import time
config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "ledger_path": str(config.ledger.absolute_path),
        "store_backend": config.store.backend,
    }


def print_config_summary() -> None:
    """Print a summary of current configuration to stdout."""
    status = get_config_status()
    print("\n" + "=" * 60)
    print("LEDGER SYNC CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path']}")
    print(f"File exists: {status['config_file_exists']}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to sync.ini for production)")
    print("-" * 60)
    print(f"Ledger:      {config.ledger.absolute_path}")
    print(f"Store:       {config.store.backend}")
    if config.store.backend == "sqlite":
        print(f"Database:    {config.store.absolute_sqlite_path}")
    else:
        print(f"Store URL:   {config.store.http_base_url}")
    print(f"Log level:   {config.logging.level}")
    print("=" * 60 + "\n")


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_ledger_file:
    """
    Context manager for pointing the configuration at a temporary ledger.

    Usage:
        from ledger_sync.config import use_ledger_file

        def test_something(tmp_path):
            with use_ledger_file(tmp_path / "ledger.txt"):
                ...

    Args:
        ledger_path: Path to the ledger file to use
    """

    def __init__(self, ledger_path: Path | str):
        self.ledger_path = Path(ledger_path)
        self.original_path: str | None = None

    def __enter__(self) -> Path:
        """Point the ledger setting at the temporary path."""
        self.original_path = config.ledger.path
        config.ledger.path = str(self.ledger_path)
        return self.ledger_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Restore original ledger path."""
        if self.original_path is not None:
            config.ledger.path = self.original_path
        return None
