"""CLI command: replay one row per day over a historical range."""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from pathlib import Path

import click

from ..config.settings import Settings
from ..observability import get_logger, timing_context
from ..pipelines.snapshot_pipeline import BackfillResult
from .cli_common import CONTEXT_SETTINGS, bootstrap, build_adapter, build_pipeline, env_file_option


async def run_backfill(
    settings: Settings,
    start_date: date | None = None,
    **adapter_kwargs,
) -> BackfillResult | None:
    """Run the backfill; log and swallow anything that escapes it."""
    logger = get_logger("app")

    try:
        with timing_context("backfill") as ctx:
            async with build_adapter(settings, **adapter_kwargs) as adapter:
                pipeline = build_pipeline(settings, adapter)
                result = await pipeline.backfill(start_date)
            ctx["days_processed"] = result.days_processed
    except Exception as exc:
        logger.error(f"Backfill process error: {exc}")
        return None

    if result.failed_days:
        logger.warning(
            f"Backfill finished with {len(result.failed_days)} failed day(s): "
            + ", ".join(day.isoformat() for day in result.failed_days)
        )
    else:
        logger.success(f"Backfill appended {result.rows_appended} row(s)")
    return result


@click.command(
    context_settings=CONTEXT_SETTINGS,
    help="Append one row per day from the start date through yesterday",
)
@click.option(
    "--start",
    "start",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="First day to replay, YYYY-MM-DD (default: GMP_BACKFILL_START)",
)
@env_file_option
def cli(start: datetime | None, env_file: Path | None) -> int:
    """Backfill entry point."""
    settings = bootstrap(env_file)
    if settings is not None:
        asyncio.run(run_backfill(settings, start.date() if start else None))
    return 0
