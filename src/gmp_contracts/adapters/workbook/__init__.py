"""Local .xlsx row sink."""

from .adapter import WorkbookSink, WorkbookSinkConfig, create_workbook_sink

__all__ = ["WorkbookSink", "WorkbookSinkConfig", "create_workbook_sink"]
