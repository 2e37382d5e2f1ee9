"""Google Sheets sink.

Appends summary rows through the Sheets v4 ``values.append`` call using a
service account. Credentials come either as inline JSON (``GOOGLE_CREDENTIALS``)
or as a key file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ...config.settings import ConfigError
from ...observability import StatusLogger, get_logger
from ...rollups.aggregator import SummaryRow
from ..sink import SinkError

__all__ = [
    "SCOPES",
    "GoogleSheetSink",
    "SheetsSinkConfig",
    "create_sheets_sink",
]

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


@dataclass
class SheetsSinkConfig:
    """Configuration for the Google Sheets sink."""

    spreadsheet_id: str
    sheet_name: str = "Sheet1"
    credentials_json: str | None = None
    credentials_file: Path | None = None
    value_input_option: str = "USER_ENTERED"
    insert_data_option: str = "INSERT_ROWS"


class GoogleSheetSink:
    """Append summary rows to a Google spreadsheet.

    Example:
        >>> sink = create_sheets_sink(
        ...     spreadsheet_id="1g0K...",
        ...     credentials_file=Path("credentials.json"),
        ... )
        >>> sink.append(row)
    """

    def __init__(
        self,
        config: SheetsSinkConfig,
        *,
        service: Any = None,
        logger: StatusLogger | None = None,
    ) -> None:
        """Initialize Google Sheets sink.

        Parameters
        ----------
        config
            Sink configuration
        service
            Prebuilt Sheets API service (built lazily from credentials if None)
        logger
            Logger exposing info/success/warning/error
        """
        self.config = config
        self.logger = logger or get_logger("sink")
        self._service = service

    def _load_credentials(self) -> service_account.Credentials:
        """Load service account credentials.

        Raises
        ------
        ConfigError
            If credentials are missing or malformed
        """
        if self.config.credentials_json:
            try:
                info = json.loads(self.config.credentials_json)
                if not isinstance(info, dict):
                    raise ValueError(f"expected a JSON object, got {type(info).__name__}")
                return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
            except ValueError as exc:
                raise ConfigError(f"GOOGLE_CREDENTIALS is not a valid service account JSON: {exc}") from exc

        if self.config.credentials_file:
            try:
                return service_account.Credentials.from_service_account_file(
                    str(self.config.credentials_file), scopes=SCOPES
                )
            except (OSError, ValueError) as exc:
                raise ConfigError(
                    f"Cannot load credentials from {self.config.credentials_file}: {exc}"
                ) from exc

        raise ConfigError("GOOGLE_CREDENTIALS not found. Set GOOGLE_CREDENTIALS or GMP_CREDENTIALS_FILE in .env")

    def _get_service(self) -> Any:
        if self._service is None:
            credentials = self._load_credentials()
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return self._service

    def append(self, row: SummaryRow) -> None:
        """Append ``row`` after the last row of the sheet.

        Raises
        ------
        ConfigError
            If credentials are missing or malformed
        SinkError
            If the Sheets API call fails
        """
        try:
            service = self._get_service()
            result = (
                service.spreadsheets()
                .values()
                .append(
                    spreadsheetId=self.config.spreadsheet_id,
                    range=self.config.sheet_name,
                    valueInputOption=self.config.value_input_option,
                    insertDataOption=self.config.insert_data_option,
                    body={"values": [row.to_values()]},
                )
                .execute()
            )
        except ConfigError as exc:
            self.logger.error(f"Error updating sheet: {exc}")
            raise
        except (HttpError, GoogleAuthError, OSError) as exc:
            self.logger.error(f"Error updating sheet: {exc}")
            raise SinkError(f"Sheets append failed: {exc}") from exc

        updated = (result or {}).get("updates", {}).get("updatedRange", self.config.sheet_name)
        self.logger.success(f"Saved data for {row.label} ({updated})")


def create_sheets_sink(
    *,
    spreadsheet_id: str,
    sheet_name: str = "Sheet1",
    credentials_json: str | None = None,
    credentials_file: Path | str | None = None,
    service: Any = None,
    logger: StatusLogger | None = None,
) -> GoogleSheetSink:
    """Factory function to create a Google Sheets sink."""
    if isinstance(credentials_file, str):
        credentials_file = Path(credentials_file)

    config = SheetsSinkConfig(
        spreadsheet_id=spreadsheet_id,
        sheet_name=sheet_name,
        credentials_json=credentials_json,
        credentials_file=credentials_file,
    )
    return GoogleSheetSink(config, service=service, logger=logger)
