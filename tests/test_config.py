"""Tests for ledger_sync.config loading and overrides."""

import configparser

import pytest

from ledger_sync import config as config_module
from ledger_sync.config import (
    LedgerSettings,
    StoreSettings,
    SyncConfig,
    _load_from_ini,
    _parse_bool,
    get_config_status,
    load_config,
    print_config_summary,
    reload_config,
    use_ledger_file,
)


@pytest.mark.unit
def test_defaults():
    cfg = SyncConfig()

    assert cfg.ledger.path == "data/ledger.txt"
    assert cfg.ledger.read_attempts == 3
    assert cfg.ledger.read_delay_seconds == 5.0
    assert cfg.store.backend == "sqlite"
    assert cfg.store.table == "records"
    assert cfg.watcher.debounce_seconds == 0.5
    assert cfg.watcher.run_on_start is True
    assert cfg.logging.level == "INFO"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_ledger_env_overrides(monkeypatch):
    monkeypatch.setenv("LEDGER_SYNC_FILE", "/srv/ledger/notes.txt")
    monkeypatch.setenv("LEDGER_SYNC_READ_ATTEMPTS", "7")
    monkeypatch.setenv("LEDGER_SYNC_READ_DELAY", "0.25")

    cfg = load_config()

    assert cfg.ledger.path == "/srv/ledger/notes.txt"
    assert cfg.ledger.read_attempts == 7
    assert cfg.ledger.read_delay_seconds == 0.25


@pytest.mark.unit
def test_store_env_overrides(monkeypatch):
    monkeypatch.setenv("LEDGER_SYNC_STORE", "HTTP")
    monkeypatch.setenv("LEDGER_SYNC_DB_PATH", "/var/db/records.db")
    monkeypatch.setenv("LEDGER_SYNC_STORE_URL", "https://records.example.org")

    cfg = load_config()

    assert cfg.store.backend == "http"
    assert cfg.store.sqlite_path == "/var/db/records.db"
    assert cfg.store.http_base_url == "https://records.example.org"


@pytest.mark.unit
def test_unknown_store_env_value_is_ignored(monkeypatch):
    monkeypatch.setenv("LEDGER_SYNC_STORE", "mongodb")
    monkeypatch.setenv("LEDGER_SYNC_DB_PATH", "x.db")

    cfg = load_config()

    assert cfg.store.backend in ("sqlite", "http")
    assert cfg.store.backend != "mongodb"


@pytest.mark.unit
def test_log_level_env_override_is_uppercased(monkeypatch):
    monkeypatch.setenv("LEDGER_SYNC_LOG_LEVEL", "debug")
    assert load_config().logging.level == "DEBUG"


@pytest.mark.unit
def test_ini_overrides():
    """Every section of the INI file is applied to the dataclasses."""
    parser = configparser.ConfigParser()
    parser.read_dict(
        {
            "ledger": {
                "path": "ledgers/main.txt",
                "read_attempts": "5",
                "read_delay_seconds": "2.5",
            },
            "store": {
                "backend": "http",
                "table": "Notas de Manutenção",
                "id_column": "Número",
                "payload_column": "Observação",
                "connect_attempts": "4",
                "connect_delay_seconds": "0.5",
                "http_base_url": "http://records:9000",
                "http_timeout_seconds": "12",
            },
            "watcher": {"debounce_seconds": "1.5", "run_on_start": "no"},
            "logging": {"level": "warning", "format": "JSON"},
        }
    )

    cfg = SyncConfig()
    _load_from_ini(parser, cfg)

    assert cfg.ledger.path == "ledgers/main.txt"
    assert cfg.ledger.read_attempts == 5
    assert cfg.ledger.read_delay_seconds == 2.5
    assert cfg.store.backend == "http"
    assert cfg.store.table == "Notas de Manutenção"
    assert cfg.store.id_column == "Número"
    assert cfg.store.payload_column == "Observação"
    assert cfg.store.connect_attempts == 4
    assert cfg.store.connect_delay_seconds == 0.5
    assert cfg.store.http_base_url == "http://records:9000"
    assert cfg.store.http_timeout_seconds == 12
    assert cfg.watcher.debounce_seconds == 1.5
    assert cfg.watcher.run_on_start is False
    assert cfg.logging.level == "WARNING"
    assert cfg.logging.format == "json"


@pytest.mark.unit
def test_ini_invalid_choices_keep_defaults():
    parser = configparser.ConfigParser()
    parser.read_dict({"store": {"backend": "oracle"}, "logging": {"format": "xml"}})

    cfg = SyncConfig()
    _load_from_ini(parser, cfg)

    assert cfg.store.backend == "sqlite"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("Yes", True), ("1", True), ("on", True), ("false", False), ("0", False)],
)
def test_parse_bool(value, expected):
    assert _parse_bool(value) is expected


@pytest.mark.unit
def test_relative_paths_resolve_against_project_root():
    expected = config_module.PROJECT_ROOT / "data/l.txt"
    assert LedgerSettings(path="data/l.txt").absolute_path == expected
    assert StoreSettings(sqlite_path="/abs/r.db").absolute_sqlite_path.as_posix() == "/abs/r.db"


@pytest.mark.unit
def test_reload_config_replaces_singleton(monkeypatch):
    monkeypatch.setattr(config_module, "config", config_module.config)
    monkeypatch.setenv("LEDGER_SYNC_FILE", "/tmp/reloaded.txt")

    reloaded = reload_config()

    assert config_module.config is reloaded
    assert reloaded.ledger.path == "/tmp/reloaded.txt"


@pytest.mark.unit
def test_get_config_status_keys():
    status = get_config_status()

    assert set(status) == {
        "config_file_exists",
        "config_file_path",
        "using_example",
        "ledger_path",
        "store_backend",
    }
    assert status["store_backend"] == config_module.config.store.backend


@pytest.mark.unit
def test_print_config_summary(capsys):
    print_config_summary()

    out = capsys.readouterr().out
    assert "LEDGER SYNC CONFIGURATION" in out
    assert str(config_module.config.ledger.absolute_path) in out


@pytest.mark.unit
def test_use_ledger_file_restores_path(tmp_path):
    original = config_module.config.ledger.path

    with use_ledger_file(tmp_path / "ledger.txt") as path:
        assert config_module.config.ledger.absolute_path == path

    assert config_module.config.ledger.path == original
