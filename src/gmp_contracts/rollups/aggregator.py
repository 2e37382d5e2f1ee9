"""Summary row aggregation.

Combine the six per-network, per-window counts with a timestamp label into
the flat row appended to the sink.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import NamedTuple

from .time_windows import ensure_aware

__all__ = [
    "COUNT_COLUMNS",
    "LABEL_FORMAT",
    "SUMMARY_HEADER",
    "SummaryRow",
    "build_row",
    "format_label",
]

SUMMARY_HEADER = (
    "Date",
    "Mainnet 28 DAU",
    "Mainnet Quarter",
    "Mainnet All Time",
    "Testnet 28 DAU",
    "Testnet Quarter",
    "Testnet All Time",
)

COUNT_COLUMNS = len(SUMMARY_HEADER) - 1

LABEL_FORMAT = "%Y-%m-%d %H:%M:%S"


class SummaryRow(NamedTuple):
    """One appended row, in sink column order."""

    label: str
    mainnet_28: int
    mainnet_quarter: int
    mainnet_all_time: int
    testnet_28: int
    testnet_quarter: int
    testnet_all_time: int

    def to_values(self) -> list[str | int]:
        """Row as a plain list for spreadsheet APIs."""
        return list(self)


def build_row(label: str, counts: Sequence[int]) -> SummaryRow:
    """Build a summary row from a label and six counts.

    Parameters
    ----------
    label
        Timestamp label for the Date column
    counts
        Mainnet 28d, quarter, all-time, then testnet 28d, quarter, all-time

    Returns
    -------
    SummaryRow
        Immutable row

    Raises
    ------
    ValueError
        If ``counts`` does not hold exactly six values
    """
    if len(counts) != COUNT_COLUMNS:
        raise ValueError(f"Expected {COUNT_COLUMNS} counts, got {len(counts)}")
    return SummaryRow(label, *counts)


def format_label(reference: datetime) -> str:
    """Render the Date column for a reference instant in its own timezone."""
    return ensure_aware(reference).strftime(LABEL_FORMAT)
