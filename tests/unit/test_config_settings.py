"""Tests for configuration and secrets management."""

import os
from datetime import date
from pathlib import Path

import pytest

from gmp_contracts.config.settings import (
    DEFAULT_BACKFILL_START,
    EARLIEST_TIME,
    MAINNET_API_URL,
    ConfigError,
    Settings,
    load_env_file,
    load_settings,
    parse_date,
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Clean environment variables before each test."""
    original_env = os.environ.copy()

    for var in [k for k in os.environ if k.startswith("GMP_") or k == "GOOGLE_CREDENTIALS"]:
        del os.environ[var]

    # Keep a stray ./.env out of the way
    monkeypatch.chdir(tmp_path)

    yield

    os.environ.clear()
    os.environ.update(original_env)


def test_settings_defaults():
    settings = Settings()

    assert settings.sink == "workbook"
    assert settings.workbook_path == Path("contracts.xlsx")
    assert settings.sheet_name == "Sheet1"
    assert settings.mainnet_url == MAINNET_API_URL
    assert settings.request_timeout == 60.0
    assert settings.all_time_origin == EARLIEST_TIME
    assert settings.backfill_start == DEFAULT_BACKFILL_START == date(2025, 2, 10)
    assert settings.backfill_delay == 2.0


def test_settings_with_string_paths():
    settings = Settings(workbook_path="out/c.xlsx", credentials_file="key.json", log_dir="logs")

    assert settings.workbook_path == Path("out/c.xlsx")
    assert settings.credentials_file == Path("key.json")
    assert settings.log_dir == Path("logs")


def test_unknown_sink_rejected():
    with pytest.raises(ConfigError, match="GMP_SINK"):
        Settings(sink="csv")


def test_sheets_sink_requires_spreadsheet_id():
    """Missing config produces clear errors."""
    with pytest.raises(ConfigError, match="GMP_SPREADSHEET_ID is required"):
        Settings(sink="sheets")


def test_unknown_timezone_rejected():
    with pytest.raises(ConfigError, match="GMP_TIMEZONE"):
        Settings(timezone="Mars/Olympus")


def test_delay_bounds_validated():
    with pytest.raises(ConfigError, match="GMP_BACKFILL_DELAY"):
        Settings(backfill_delay=10.0, backfill_max_delay=5.0)


def test_unknown_log_level_rejected():
    with pytest.raises(ConfigError, match="GMP_LOG_LEVEL"):
        Settings(log_level="VERBOSE")


def test_from_env_unknown_log_level(monkeypatch):
    monkeypatch.setenv("GMP_LOG_LEVEL", "verbose")

    with pytest.raises(ConfigError, match="GMP_LOG_LEVEL"):
        Settings.from_env()


def test_from_env_reads_variables(monkeypatch):
    monkeypatch.setenv("GMP_SINK", "Sheets")
    monkeypatch.setenv("GMP_SPREADSHEET_ID", "sheet-123")
    monkeypatch.setenv("GOOGLE_CREDENTIALS", '{"type": "service_account"}')
    monkeypatch.setenv("GMP_REQUEST_TIMEOUT", "15")
    monkeypatch.setenv("GMP_TIMEZONE", "Europe/Madrid")
    monkeypatch.setenv("GMP_BACKFILL_START", "2025-03-01")
    monkeypatch.setenv("GMP_ALL_TIME_ORIGIN", "0")
    monkeypatch.setenv("GMP_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.sink == "sheets"
    assert settings.spreadsheet_id == "sheet-123"
    assert settings.google_credentials == '{"type": "service_account"}'
    assert settings.request_timeout == 15.0
    assert settings.timezone == "Europe/Madrid"
    assert settings.backfill_start == date(2025, 3, 1)
    assert settings.all_time_origin == 0
    assert settings.log_level == "DEBUG"


def test_from_env_invalid_number(monkeypatch):
    monkeypatch.setenv("GMP_REQUEST_TIMEOUT", "soon")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        Settings.from_env()


def test_from_env_invalid_date(monkeypatch):
    monkeypatch.setenv("GMP_BACKFILL_START", "10/02/2025")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        Settings.from_env()


def test_load_env_file(tmp_path):
    env_file = tmp_path / "test.env"
    env_file.write_text(
        """
# comment
GMP_WORKBOOK_PATH="data/contracts.xlsx"
GMP_SHEET_NAME='Stats'
GMP_BACKFILL_DELAY=0.5
"""
    )

    load_env_file(env_file)

    assert os.environ["GMP_WORKBOOK_PATH"] == "data/contracts.xlsx"
    assert os.environ["GMP_SHEET_NAME"] == "Stats"
    assert os.environ["GMP_BACKFILL_DELAY"] == "0.5"


def test_from_env_uses_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("GMP_WORKBOOK_PATH=rows.xlsx\nGMP_LOG_DIR=logs\n")

    settings = Settings.from_env(env_file)

    assert settings.workbook_path == Path("rows.xlsx")
    assert settings.log_dir == Path("logs")


def test_from_env_missing_env_file_is_fine(tmp_path):
    settings = Settings.from_env(tmp_path / "absent.env")

    assert settings.sink == "workbook"


def test_from_env_undecodable_env_file(tmp_path):
    env_file = tmp_path / "bad.env"
    env_file.write_bytes(b"GMP_SINK=\xff\xfe\n")

    with pytest.raises(ConfigError, match="Cannot read env file"):
        Settings.from_env(env_file)


def test_from_env_env_file_is_directory(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read env file"):
        Settings.from_env(tmp_path)


def test_load_settings_reads_env_file(tmp_path):
    (tmp_path / ".env").write_text("GMP_SHEET_NAME=Rows\n")

    assert load_settings().sheet_name == "Rows"


def test_parse_date():
    assert parse_date(None, date(2020, 1, 1)) == date(2020, 1, 1)
    assert parse_date("", date(2020, 1, 1)) == date(2020, 1, 1)
    assert parse_date(" 2025-02-10 ", date(2020, 1, 1)) == date(2025, 2, 10)

    with pytest.raises(ValueError):
        parse_date("2025-13-01", date(2020, 1, 1))
