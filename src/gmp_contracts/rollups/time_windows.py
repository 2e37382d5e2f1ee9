"""Time window calculations for contract counts.

Compute the three query windows (trailing 28 days, quarter to date, all time)
as Unix-second ranges ending at a reference instant. The quarter start is
localized in the reference's own timezone so DST shifts are honoured.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import NamedTuple

import pytz

from ..config.settings import EARLIEST_TIME

__all__ = [
    "DAY_SECONDS",
    "RUN_TIME_OF_DAY",
    "TimeRange",
    "WindowSet",
    "compute_windows",
    "ensure_aware",
    "get_quarter_start",
    "reference_for_day",
    "to_unix",
]

DAY_SECONDS = 86400
TRAILING_DAYS = 28

# Fixed time of day for daily references, keeps runs comparable
RUN_TIME_OF_DAY = (0, 3, 4)


class TimeRange(NamedTuple):
    """Inclusive query range in Unix seconds."""

    start: int
    end: int

    def to_payload(self) -> dict[str, int]:
        """Request body expected by the GMPStats endpoint."""
        return {"fromTime": self.start, "toTime": self.end}


class WindowSet(NamedTuple):
    """The three windows queried per network."""

    last28: TimeRange
    quarter: TimeRange
    all_time: TimeRange


def _make_range(start: int, end: int) -> TimeRange:
    if start > end:
        raise ValueError(f"Range start {start} is after end {end}")
    return TimeRange(start, end)


def ensure_aware(dt: datetime) -> datetime:
    """Return ``dt`` with tzinfo, treating naive values as UTC."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt


def to_unix(dt: datetime) -> int:
    """Whole Unix seconds for a datetime (naive means UTC)."""
    return int(ensure_aware(dt).timestamp())


def get_quarter_start(reference: datetime) -> datetime:
    """Get start of the calendar quarter containing ``reference``.

    Parameters
    ----------
    reference
        Any instant in the quarter

    Returns
    -------
    datetime
        First day of January, April, July or October at 00:03:04, in the
        reference's timezone

    Examples
    --------
    >>> get_quarter_start(datetime(2024, 5, 15, tzinfo=pytz.UTC))
    datetime.datetime(2024, 4, 1, 0, 3, 4, tzinfo=<UTC>)
    """
    reference = ensure_aware(reference)
    month = (reference.month - 1) // 3 * 3 + 1
    naive = datetime(reference.year, month, 1, *RUN_TIME_OF_DAY)

    tz = reference.tzinfo
    if hasattr(tz, "localize"):
        # pytz zones need localize() to pick the right UTC offset
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def compute_windows(
    reference: datetime,
    *,
    all_time_origin: int = EARLIEST_TIME,
) -> WindowSet:
    """Compute the 28 day, quarter and all-time windows ending at ``reference``.

    Parameters
    ----------
    reference
        End of every window (naive datetimes are treated as UTC)
    all_time_origin
        Lower bound of the all-time window in Unix seconds

    Returns
    -------
    WindowSet
        Windows in query order

    Examples
    --------
    >>> windows = compute_windows(datetime(2024, 5, 15, tzinfo=pytz.UTC))
    >>> windows.last28.end - windows.last28.start
    2419200
    """
    end = to_unix(reference)

    last28 = _make_range(end - TRAILING_DAYS * DAY_SECONDS, end)

    # A reference in the first minutes of a quarter precedes 00:03:04
    quarter_start = min(to_unix(get_quarter_start(reference)), end)
    quarter = _make_range(quarter_start, end)

    all_time = _make_range(min(all_time_origin, end), end)

    return WindowSet(last28=last28, quarter=quarter, all_time=all_time)


def reference_for_day(day: date, timezone_str: str = "UTC") -> datetime:
    """Reference instant for a calendar day: 00:03:04 local time.

    Parameters
    ----------
    day
        ``date`` or ``datetime`` whose calendar day is used
    timezone_str
        Timezone name (e.g., "Europe/Madrid")
    """
    tz = pytz.timezone(timezone_str)
    return tz.localize(datetime(day.year, day.month, day.day, *RUN_TIME_OF_DAY))

