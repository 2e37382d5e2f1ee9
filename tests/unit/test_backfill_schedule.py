"""Tests for backfill day iteration and pacing."""

from datetime import date, timedelta

import pytest

from gmp_contracts.pipelines.snapshot_pipeline import BackfillPacer, iter_backfill_days


def test_iterates_start_through_yesterday():
    days = list(iter_backfill_days(date(2025, 2, 10), date(2025, 2, 14)))

    assert days == [date(2025, 2, 10), date(2025, 2, 11), date(2025, 2, 12), date(2025, 2, 13)]


def test_each_day_once_in_ascending_order():
    start = date(2024, 12, 20)
    today = date(2025, 3, 5)

    days = list(iter_backfill_days(start, today))

    assert len(days) == len(set(days)) == (today - start).days
    assert days == sorted(days)
    assert days[0] == start
    assert days[-1] == today - timedelta(days=1)


def test_crosses_leap_day():
    days = list(iter_backfill_days(date(2024, 2, 27), date(2024, 3, 2)))

    assert date(2024, 2, 29) in days
    assert len(days) == 4


@pytest.mark.parametrize("start", [date(2025, 2, 10), date(2025, 3, 1)])
def test_nothing_when_start_not_before_today(start):
    assert list(iter_backfill_days(start, date(2025, 2, 10))) == []


def test_pacer_keeps_base_delay_on_clean_days():
    pacer = BackfillPacer(base_delay=2.0, max_delay=60.0)

    assert [pacer.record(True) for _ in range(3)] == [2.0, 2.0, 2.0]


def test_pacer_backs_off_and_caps():
    pacer = BackfillPacer(base_delay=2.0, max_delay=10.0, backoff=2.0)

    delays = [pacer.record(False) for _ in range(4)]

    assert delays == [4.0, 8.0, 10.0, 10.0]


def test_pacer_resets_after_clean_day():
    pacer = BackfillPacer(base_delay=2.0, max_delay=60.0)
    pacer.record(False)
    pacer.record(False)

    assert pacer.record(True) == 2.0
    assert pacer.record(False) == 4.0


def test_pacer_zero_base_delay():
    pacer = BackfillPacer(base_delay=0.0, max_delay=0.0)

    assert pacer.record(False) == 0.0


def test_pacer_zero_base_delay_still_backs_off():
    pacer = BackfillPacer(base_delay=0.0, max_delay=60.0)

    delays = [pacer.record(False), pacer.record(False), pacer.record(True)]

    assert delays == [2.0, 4.0, 0.0]
