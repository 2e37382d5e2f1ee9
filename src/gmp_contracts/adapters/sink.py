"""Row sink interface shared by the workbook and Google Sheets adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..config.settings import Settings
    from ..observability import StatusLogger
    from ..rollups.aggregator import SummaryRow

__all__ = [
    "RowSink",
    "SinkError",
    "create_sink",
]


class SinkError(Exception):
    """Raised when a row could not be persisted."""

    pass


class RowSink(Protocol):
    """Anything that can persist a summary row."""

    def append(self, row: SummaryRow) -> None: ...


def create_sink(settings: Settings, *, logger: StatusLogger | None = None) -> RowSink:
    """Build the sink selected by ``settings.sink``.

    Parameters
    ----------
    settings
        Loaded settings
    logger
        Optional logger passed to the sink

    Returns
    -------
    RowSink
        Workbook or Google Sheets sink
    """
    if settings.sink == "sheets":
        from .sheets.adapter import create_sheets_sink

        return create_sheets_sink(
            spreadsheet_id=settings.spreadsheet_id or "",
            sheet_name=settings.sheet_name,
            credentials_json=settings.google_credentials,
            credentials_file=settings.credentials_file,
            logger=logger,
        )

    from .workbook.adapter import create_workbook_sink

    return create_workbook_sink(
        settings.workbook_path,
        sheet_name=settings.sheet_name,
        logger=logger,
    )
