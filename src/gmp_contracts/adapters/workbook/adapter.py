"""Local Excel workbook sink.

Reads the workbook if it exists, appends one row and writes it back. A new
workbook (or a new worksheet) starts with the summary header row.
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ...observability import StatusLogger, get_logger
from ...rollups.aggregator import SUMMARY_HEADER, SummaryRow
from ..sink import SinkError

__all__ = [
    "WorkbookSink",
    "WorkbookSinkConfig",
    "create_workbook_sink",
]


@dataclass
class WorkbookSinkConfig:
    """Configuration for the workbook sink."""

    path: Path
    sheet_name: str = "Sheet1"


class WorkbookSink:
    """Append summary rows to an .xlsx file."""

    def __init__(self, config: WorkbookSinkConfig, *, logger: StatusLogger | None = None) -> None:
        self.config = config
        self.logger = logger or get_logger("sink")

    def _open(self) -> tuple[Workbook, Any]:
        path = self.config.path
        sheet_name = self.config.sheet_name

        if path.exists():
            self.logger.info("Excel file exists. Loading workbook...")
            workbook = load_workbook(path)
            if sheet_name in workbook.sheetnames:
                return workbook, workbook[sheet_name]
            worksheet = workbook.create_sheet(sheet_name)
        else:
            self.logger.info("Excel file not found. Creating new workbook...")
            workbook = Workbook()
            worksheet = workbook.active
            worksheet.title = sheet_name

        worksheet.append(list(SUMMARY_HEADER))
        return workbook, worksheet

    def append(self, row: SummaryRow) -> None:
        """Append ``row`` and save the workbook.

        Raises
        ------
        SinkError
            If the workbook cannot be read or written
        """
        path = self.config.path
        try:
            workbook, worksheet = self._open()
            self.logger.info(f"Appending new data row for date: {row.label}")
            worksheet.append(row.to_values())
            path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(path)
        except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
            self.logger.error(f"Error updating workbook {path}: {exc}")
            raise SinkError(f"Failed to write {path}: {exc}") from exc

        self.logger.success(f"Excel sheet updated successfully and saved to {path}.")

    def read_rows(self) -> list[tuple[Any, ...]]:
        """Return all rows of the worksheet, header included."""
        if not self.config.path.exists():
            return []
        workbook = load_workbook(self.config.path, read_only=True)
        try:
            if self.config.sheet_name not in workbook.sheetnames:
                return []
            return list(workbook[self.config.sheet_name].iter_rows(values_only=True))
        finally:
            workbook.close()


def create_workbook_sink(
    path: Path | str,
    *,
    sheet_name: str = "Sheet1",
    logger: StatusLogger | None = None,
) -> WorkbookSink:
    """Factory function to create a workbook sink.

    Example:
        >>> sink = create_workbook_sink("contracts.xlsx")
        >>> sink.append(build_row("2025-02-10 00:03:04", [1, 2, 3, 4, 5, 6]))
    """
    path = Path(path) if isinstance(path, str) else path
    return WorkbookSink(WorkbookSinkConfig(path=path, sheet_name=sheet_name), logger=logger)
