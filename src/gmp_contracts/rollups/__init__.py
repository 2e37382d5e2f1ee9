"""Query windows and summary rows."""

from .aggregator import SUMMARY_HEADER, SummaryRow, build_row, format_label
from .time_windows import (
    TimeRange,
    WindowSet,
    compute_windows,
    get_quarter_start,
    reference_for_day,
)

__all__ = [
    # Time windows
    "TimeRange",
    "WindowSet",
    "compute_windows",
    "get_quarter_start",
    "reference_for_day",
    # Aggregation
    "SUMMARY_HEADER",
    "SummaryRow",
    "build_row",
    "format_label",
]
