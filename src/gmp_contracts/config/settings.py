"""Centralized configuration and secrets management.

Loads configuration from a .env file and the environment and provides typed
access to settings.

Missing or malformed values produce ConfigError with a message naming the
variable to fix.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import pytz

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

MAINNET_API_URL = "https://api.axelarscan.io/gmp/GMPStats"
TESTNET_API_URL = "https://testnet.api.axelarscan.io/gmp/GMPStats"

# 2021-01-01T00:00:00Z, earliest instant with GMP history
EARLIEST_TIME = 1609459200

DEFAULT_BACKFILL_START = date(2025, 2, 10)

SINK_CHOICES = ("workbook", "sheets")

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Settings for the contracts tracker.

    Attributes
    ----------
    sink : str
        Row sink: ``workbook`` (local .xlsx) or ``sheets`` (Google Sheets)
    workbook_path : Path
        Workbook file used by the workbook sink
    sheet_name : str
        Worksheet name (workbook) or append range (Google Sheets)
    spreadsheet_id : str | None
        Google spreadsheet ID (required for the sheets sink)
    google_credentials : str | None
        Inline service account JSON
    credentials_file : Path | None
        Service account JSON file, used when no inline credentials are set
    mainnet_url : str
        GMPStats endpoint for mainnet
    testnet_url : str
        GMPStats endpoint for testnet
    request_timeout : float
        Per-request timeout in seconds
    timezone : str
        Timezone used for references and row labels
    all_time_origin : int
        Lower bound (Unix seconds) of the all-time window
    backfill_start : date
        First day replayed by backfill
    backfill_delay : float
        Base delay between backfilled days in seconds
    backfill_max_delay : float
        Upper bound for the adaptive backfill delay
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSONL logs (console only when unset)
    """

    sink: str = "workbook"
    workbook_path: Path = Path("contracts.xlsx")
    sheet_name: str = "Sheet1"

    # Google Sheets
    spreadsheet_id: str | None = None
    google_credentials: str | None = None
    credentials_file: Path | None = None

    # Upstream API
    mainnet_url: str = MAINNET_API_URL
    testnet_url: str = TESTNET_API_URL
    request_timeout: float = 60.0

    # Windows
    timezone: str = "UTC"
    all_time_origin: int = EARLIEST_TIME

    # Backfill
    backfill_start: date = DEFAULT_BACKFILL_START
    backfill_delay: float = 2.0
    backfill_max_delay: float = 60.0

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if isinstance(self.workbook_path, str):
            self.workbook_path = Path(self.workbook_path)

        if self.credentials_file and isinstance(self.credentials_file, str):
            self.credentials_file = Path(self.credentials_file)

        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        if self.sink not in SINK_CHOICES:
            raise ConfigError(f"GMP_SINK must be one of {', '.join(SINK_CHOICES)}, got {self.sink!r}")

        if self.sink == "sheets" and not self.spreadsheet_id:
            raise ConfigError(
                "GMP_SPREADSHEET_ID is required when GMP_SINK=sheets. "
                "Set it to the ID from the spreadsheet URL in .env"
            )

        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError as exc:
            raise ConfigError(f"GMP_TIMEZONE is not a known timezone: {self.timezone}") from exc

        if self.request_timeout <= 0:
            raise ConfigError("GMP_REQUEST_TIMEOUT must be positive")

        if self.backfill_delay < 0 or self.backfill_max_delay < self.backfill_delay:
            raise ConfigError("GMP_BACKFILL_DELAY must be >= 0 and <= GMP_BACKFILL_MAX_DELAY")

        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"GMP_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, otherwise from os.environ.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Returns
        -------
        Settings
            Loaded settings

        Raises
        ------
        ConfigError
            If settings are invalid
        """
        if env_file is None:
            env_file = Path(".env")

        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            try:
                load_env_file(env_file)
            except (OSError, UnicodeDecodeError) as exc:
                raise ConfigError(f"Cannot read env file {env_file}: {exc}") from exc

        env = os.environ

        try:
            return cls(
                sink=env.get("GMP_SINK", "workbook").strip().lower(),
                workbook_path=Path(env.get("GMP_WORKBOOK_PATH", "contracts.xlsx")),
                sheet_name=env.get("GMP_SHEET_NAME", "Sheet1"),
                spreadsheet_id=env.get("GMP_SPREADSHEET_ID") or None,
                google_credentials=env.get("GOOGLE_CREDENTIALS") or None,
                credentials_file=Path(env["GMP_CREDENTIALS_FILE"]) if env.get("GMP_CREDENTIALS_FILE") else None,
                mainnet_url=env.get("GMP_MAINNET_URL", MAINNET_API_URL),
                testnet_url=env.get("GMP_TESTNET_URL", TESTNET_API_URL),
                request_timeout=float(env.get("GMP_REQUEST_TIMEOUT", "60.0")),
                timezone=env.get("GMP_TIMEZONE", "UTC"),
                all_time_origin=int(env.get("GMP_ALL_TIME_ORIGIN", str(EARLIEST_TIME))),
                backfill_start=parse_date(env.get("GMP_BACKFILL_START"), DEFAULT_BACKFILL_START),
                backfill_delay=float(env.get("GMP_BACKFILL_DELAY", "2.0")),
                backfill_max_delay=float(env.get("GMP_BACKFILL_MAX_DELAY", "60.0")),
                log_level=env.get("GMP_LOG_LEVEL", "INFO").upper(),
                log_dir=Path(env["GMP_LOG_DIR"]) if env.get("GMP_LOG_DIR") else None,
            )

        except ValueError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Variables already present in the environment are overwritten.

    Parameters
    ----------
    env_file
        Path to .env file
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                # Remove quotes
                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ[key] = value


def parse_date(value: str | None, default: date) -> date:
    """Parse a YYYY-MM-DD date, returning ``default`` for empty values.

    Raises
    ------
    ValueError
        If the value is not a valid date
    """
    if not value:
        return default
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from ``env_file`` and the environment."""
    return Settings.from_env(env_file)
