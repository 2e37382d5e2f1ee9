"""Snapshot Pipeline - thin orchestration of contract counts into sink rows.

One snapshot computes the three windows for a reference instant, fans out the
six network/window counts concurrently, builds the summary row and appends it
to the sink. Backfill replays snapshots once per calendar day, sequentially,
with a pacing delay between days.
"""

from __future__ import annotations

import asyncio
import json
import time
import uuid
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import pytz

from ..adapters.gmp.adapter import CountResult, NetworkId
from ..config.settings import DEFAULT_BACKFILL_START, EARLIEST_TIME
from ..observability import StatusLogger, get_logger
from ..rollups.aggregator import SummaryRow, build_row, format_label
from ..rollups.time_windows import TimeRange, WindowSet, compute_windows, reference_for_day

if TYPE_CHECKING:
    from ..adapters.sink import RowSink

__all__ = [
    "BackfillPacer",
    "BackfillResult",
    "SnapshotPipeline",
    "SnapshotPipelineConfig",
    "SnapshotResult",
    "create_snapshot_pipeline",
    "iter_backfill_days",
]

NETWORK_ORDER = (NetworkId.MAINNET, NetworkId.TESTNET)

# First backoff step when the base delay is zero
MIN_BACKOFF_DELAY = 1.0


class ContractCounter(Protocol):
    """Source of per-network contract counts."""

    def count_detailed(self, network: NetworkId, time_range: TimeRange) -> Awaitable[CountResult]: ...


@dataclass
class SnapshotPipelineConfig:
    """Configuration for snapshot pipeline."""

    timezone: str = "UTC"
    all_time_origin: int = EARLIEST_TIME
    backfill_start: date = DEFAULT_BACKFILL_START
    backfill_delay: float = 2.0
    backfill_max_delay: float = 60.0
    backfill_backoff: float = 2.0
    log_path: Path | None = None


@dataclass
class SnapshotResult:
    """Result of one snapshot."""

    reference: datetime
    row: SummaryRow
    counts: list[CountResult]
    duration_ms: float
    trace_id: str

    @property
    def failed_counts(self) -> int:
        return sum(1 for result in self.counts if not result.ok)


@dataclass
class BackfillResult:
    """Result of a backfill run."""

    start_date: date
    end_date: date
    days_processed: int = 0
    rows_appended: int = 0
    failed_days: list[date] = field(default_factory=list)
    snapshots: list[SnapshotResult] = field(default_factory=list)
    duration_ms: float = 0
    trace_id: str = ""


class BackfillPacer:
    """Delay between backfilled days.

    Starts at ``base_delay``; every day with failed requests multiplies the
    delay by ``backoff`` (from at least ``MIN_BACKOFF_DELAY``) up to
    ``max_delay``, a clean day resets it.
    """

    def __init__(self, base_delay: float = 2.0, max_delay: float = 60.0, backoff: float = 2.0) -> None:
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff = backoff
        self.delay = base_delay

    def record(self, clean: bool) -> float:
        """Record a day's outcome and return the delay before the next day."""
        if clean:
            self.delay = self.base_delay
        else:
            self.delay = min(max(self.delay, self.base_delay, MIN_BACKOFF_DELAY) * self.backoff, self.max_delay)
        return self.delay


def iter_backfill_days(start: date, today: date) -> Iterator[date]:
    """Yield every day from ``start`` up to the day before ``today``.

    Today is excluded because its counts are still growing.

    Examples
    --------
    >>> list(iter_backfill_days(date(2025, 2, 10), date(2025, 2, 12)))
    [datetime.date(2025, 2, 10), datetime.date(2025, 2, 11)]
    """
    day = start
    while day < today:
        yield day
        day += timedelta(days=1)


class SnapshotPipeline:
    """Thin orchestration pipeline for contract count snapshots.

    Responsibilities:
    - Compute query windows for a reference instant
    - Fan out the six counter calls and bind results by position
    - Build the summary row and append it to the sink
    - Replay one snapshot per day for backfills
    - Emit structured JSONL logs with trace IDs

    Example:
        >>> async with create_gmp_adapter() as adapter:
        ...     pipeline = create_snapshot_pipeline(counter=adapter, sink=sink)
        ...     result = await pipeline.run_once()
    """

    def __init__(
        self,
        config: SnapshotPipelineConfig,
        *,
        counter: ContractCounter,
        sink: RowSink,
        logger: StatusLogger | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize snapshot pipeline.

        Parameters
        ----------
        config
            Pipeline configuration
        counter
            Contract counter (GMPStats adapter)
        sink
            Row sink (workbook or Google Sheets)
        logger
            Logger exposing info/success/warning/error
        clock
            Returns the current instant (default: now in the configured timezone)
        sleep
            Coroutine used for pacing delays
        """
        self.config = config
        self.counter = counter
        self.sink = sink
        self.logger = logger or get_logger("pipeline")
        self.tz = pytz.timezone(config.timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))
        self.sleep = sleep

    async def collect_counts(self, windows: WindowSet) -> list[CountResult]:
        """Run the six counter calls concurrently.

        Results come back in row order: mainnet 28d, quarter, all-time, then
        testnet 28d, quarter, all-time.
        """
        calls = [
            self.counter.count_detailed(network, time_range)
            for network in NETWORK_ORDER
            for time_range in windows
        ]
        return list(await asyncio.gather(*calls))

    async def run_once(self, reference: datetime | None = None, *, trace_id: str | None = None) -> SnapshotResult:
        """Count, build and append one summary row.

        Parameters
        ----------
        reference
            End instant of all windows (default: now)
        trace_id
            Trace ID for correlation (generated if None)

        Returns
        -------
        SnapshotResult
            The appended row and the individual counts

        Raises
        ------
        Exception
            Whatever the sink raised; the error is logged first
        """
        trace_id = trace_id or str(uuid.uuid4())
        start_time = time.time()

        if reference is None:
            reference = self.clock()

        windows = compute_windows(reference, all_time_origin=self.config.all_time_origin)
        label = format_label(reference)

        self.logger.info(f"Processing {label}")
        self.logger.info(f" - Last 28 days: {windows.last28.start} to {windows.last28.end}")
        self.logger.info(f" - Quarter: {windows.quarter.start} to {windows.quarter.end}")
        self.logger.info(f" - All time: {windows.all_time.start} to {windows.all_time.end}")

        counts = await self.collect_counts(windows)
        row = build_row(label, [result.count for result in counts])

        try:
            await asyncio.to_thread(self.sink.append, row)
        except Exception as exc:
            self.logger.error(f"Failed to append row for {label}: {exc}")
            self._log_event(
                "snapshot_failed",
                {
                    "trace_id": trace_id,
                    "label": label,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                    "outcome": "failure",
                },
            )
            raise

        result = SnapshotResult(
            reference=reference,
            row=row,
            counts=counts,
            duration_ms=(time.time() - start_time) * 1000,
            trace_id=trace_id,
        )

        self._log_event(
            "snapshot_appended",
            {
                "trace_id": trace_id,
                "label": label,
                "row": row.to_values(),
                "failed_counts": result.failed_counts,
                "duration_ms": result.duration_ms,
            },
        )

        return result

    async def backfill(
        self,
        start_date: date | None = None,
        today: date | None = None,
    ) -> BackfillResult:
        """Append one row per day from ``start_date`` through yesterday.

        Each day uses 00:03:04 in the configured timezone as its reference.
        A failing day is logged and skipped; the loop always continues.

        Parameters
        ----------
        start_date
            First day to replay (default: configured backfill start)
        today
            Current day; the last replayed day is the one before it

        Returns
        -------
        BackfillResult
            Counts of processed, appended and failed days
        """
        start_date = start_date or self.config.backfill_start
        today = today or self.clock().date()
        days = list(iter_backfill_days(start_date, today))

        trace_id = str(uuid.uuid4())
        start_time = time.time()
        result = BackfillResult(
            start_date=start_date,
            end_date=today - timedelta(days=1),
            trace_id=trace_id,
        )
        pacer = BackfillPacer(
            self.config.backfill_delay,
            self.config.backfill_max_delay,
            self.config.backfill_backoff,
        )

        self.logger.info("Starting historical data backfill...")
        self.logger.info(f"Start: {start_date.isoformat()}")
        self.logger.info(f"End: {result.end_date.isoformat()}")

        self._log_event(
            "pipeline_started",
            {
                "trace_id": trace_id,
                "pipeline": "backfill",
                "start_date": start_date.isoformat(),
                "end_date": result.end_date.isoformat(),
                "days": len(days),
            },
        )

        for index, day in enumerate(days):
            reference = reference_for_day(day, self.config.timezone)
            clean = False
            try:
                snapshot = await self.run_once(reference, trace_id=trace_id)
            except Exception as exc:
                result.failed_days.append(day)
                self.logger.error(f"Error processing {day.isoformat()}: {exc}")
                self._log_event(
                    "backfill_day_failed",
                    {
                        "trace_id": trace_id,
                        "day": day.isoformat(),
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
            else:
                result.rows_appended += 1
                result.snapshots.append(snapshot)
                clean = snapshot.failed_counts == 0

            result.days_processed += 1
            delay = pacer.record(clean)

            if index < len(days) - 1:
                await self.sleep(delay)

        result.duration_ms = (time.time() - start_time) * 1000

        self._log_event(
            "pipeline_completed",
            {
                "trace_id": trace_id,
                "pipeline": "backfill",
                "days_processed": result.days_processed,
                "rows_appended": result.rows_appended,
                "failed_days": [day.isoformat() for day in result.failed_days],
                "duration_ms": result.duration_ms,
                "outcome": "success" if not result.failed_days else "partial",
            },
        )
        self.logger.info("Historical data backfill complete")

        return result

    def _log_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Emit structured JSONL log entry.

        Parameters
        ----------
        event_type
            Type of log event
        data
            Event data (must be JSON-serializable)
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "component": "pipeline",
            "event_type": event_type,
            **data,
        }

        if self.config.log_path:
            self.config.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")

        self.logger.debug(f"{event_type}: {json.dumps(data)}")


def create_snapshot_pipeline(
    *,
    counter: ContractCounter,
    sink: RowSink,
    logger: StatusLogger | None = None,
    log_path: Path | str | None = None,
    clock: Callable[[], datetime] | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **config_kwargs: Any,
) -> SnapshotPipeline:
    """Factory function to create snapshot pipeline.

    Parameters
    ----------
    counter
        Contract counter
    sink
        Row sink
    logger
        Optional logger instance
    log_path
        Optional path for JSONL logs
    clock
        Optional clock override
    sleep
        Optional pacing coroutine override
    **config_kwargs
        Additional configuration options

    Example:
        >>> pipeline = create_snapshot_pipeline(
        ...     counter=adapter,
        ...     sink=create_workbook_sink("contracts.xlsx"),
        ...     timezone="Europe/Madrid",
        ...     log_path=Path("logs/pipelines/snapshot.jsonl"),
        ... )
    """
    if log_path:
        config_kwargs["log_path"] = Path(log_path) if isinstance(log_path, str) else log_path

    config = SnapshotPipelineConfig(**config_kwargs)

    return SnapshotPipeline(config, counter=counter, sink=sink, logger=logger, clock=clock, sleep=sleep)
