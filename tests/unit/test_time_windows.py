"""Tests for query window calculations."""

from datetime import date, datetime, timedelta, timezone

import pytest
import pytz

from gmp_contracts.config.settings import EARLIEST_TIME
from gmp_contracts.rollups.time_windows import (
    DAY_SECONDS,
    TimeRange,
    compute_windows,
    get_quarter_start,
    reference_for_day,
    to_unix,
)

UTC = pytz.UTC


def test_last28_is_exactly_28_days():
    reference = UTC.localize(datetime(2024, 3, 15, 10, 30))

    windows = compute_windows(reference)

    assert windows.last28.end - windows.last28.start == 28 * DAY_SECONDS
    assert windows.last28.end == to_unix(reference)


@pytest.mark.parametrize(
    "reference",
    [
        datetime(2024, 3, 1, 0, 3, 4),  # spans February of a leap year
        datetime(2023, 3, 1, 12, 0, 0),
        datetime(2025, 1, 2, 8, 0, 0),  # spans a year boundary
        datetime(2024, 11, 20, 23, 59, 59),
    ],
)
def test_last28_independent_of_month_boundaries(reference):
    windows = compute_windows(UTC.localize(reference))

    assert windows.last28.end - windows.last28.start == 2419200


def test_quarter_example_q2():
    """2024-05-15 falls in Q2, which starts on 2024-04-01."""
    reference = UTC.localize(datetime(2024, 5, 15))

    windows = compute_windows(reference)

    assert windows.quarter.start == to_unix(UTC.localize(datetime(2024, 4, 1, 0, 3, 4)))
    assert windows.quarter.end == to_unix(reference)


@pytest.mark.parametrize(
    ("month", "quarter_month"),
    [(1, 1), (2, 1), (3, 1), (4, 4), (5, 4), (6, 4), (7, 7), (8, 7), (9, 7), (10, 10), (11, 10), (12, 10)],
)
def test_quarter_start_month(month, quarter_month):
    start = get_quarter_start(UTC.localize(datetime(2025, month, 28, 18, 0)))

    assert (start.year, start.month, start.day) == (2025, quarter_month, 1)
    assert (start.hour, start.minute, start.second) == (0, 3, 4)


def test_quarter_start_in_local_timezone_after_dst_change():
    """Q2 starts at 00:03:04 CEST in Madrid, 22:03:04 UTC the day before."""
    madrid = pytz.timezone("Europe/Madrid")
    reference = madrid.localize(datetime(2024, 5, 15, 12, 0))

    windows = compute_windows(reference)

    expected = UTC.localize(datetime(2024, 3, 31, 22, 3, 4))
    assert windows.quarter.start == to_unix(expected)


def test_quarter_start_in_local_timezone_winter():
    madrid = pytz.timezone("Europe/Madrid")
    reference = madrid.localize(datetime(2024, 2, 10, 0, 3, 4))

    start = get_quarter_start(reference)

    assert start.utcoffset() == timedelta(hours=1)
    assert to_unix(start) == to_unix(UTC.localize(datetime(2023, 12, 31, 23, 3, 4)))


def test_quarter_start_with_stdlib_timezone():
    reference = datetime(2024, 8, 2, 9, 0, tzinfo=timezone.utc)

    assert get_quarter_start(reference) == datetime(2024, 7, 1, 0, 3, 4, tzinfo=timezone.utc)


def test_quarter_clamped_before_first_run_time():
    """A reference in the first minutes of a quarter keeps start <= end."""
    reference = UTC.localize(datetime(2024, 4, 1, 0, 1, 0))

    windows = compute_windows(reference)

    assert windows.quarter.start == windows.quarter.end == to_unix(reference)


def test_all_time_uses_fixed_origin():
    reference = UTC.localize(datetime(2025, 6, 1))

    windows = compute_windows(reference)

    assert windows.all_time == TimeRange(EARLIEST_TIME, to_unix(reference))
    assert EARLIEST_TIME == to_unix(UTC.localize(datetime(2021, 1, 1)))


def test_all_time_custom_origin():
    reference = UTC.localize(datetime(2025, 6, 1))

    windows = compute_windows(reference, all_time_origin=0)

    assert windows.all_time.start == 0


def test_all_windows_share_end():
    reference = UTC.localize(datetime(2025, 10, 8, 15, 30))

    windows = compute_windows(reference)

    assert {window.end for window in windows} == {to_unix(reference)}
    assert all(window.start <= window.end for window in windows)


def test_naive_reference_treated_as_utc():
    naive = datetime(2024, 5, 15, 12, 0)

    assert compute_windows(naive) == compute_windows(UTC.localize(naive))


def test_time_range_payload():
    assert TimeRange(1, 2).to_payload() == {"fromTime": 1, "toTime": 2}


def test_reference_for_day_uses_run_time():
    reference = reference_for_day(date(2025, 2, 10), "UTC")

    assert reference == UTC.localize(datetime(2025, 2, 10, 0, 3, 4))


def test_reference_for_day_localized():
    reference = reference_for_day(date(2025, 7, 1), "America/New_York")

    assert reference.utcoffset() == timedelta(hours=-4)
    assert (reference.hour, reference.minute, reference.second) == (0, 3, 4)
