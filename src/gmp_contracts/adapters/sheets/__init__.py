"""Google Sheets row sink."""

from .adapter import SCOPES, GoogleSheetSink, SheetsSinkConfig, create_sheets_sink

__all__ = ["SCOPES", "GoogleSheetSink", "SheetsSinkConfig", "create_sheets_sink"]
