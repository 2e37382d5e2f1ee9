"""CLI command: append one row with the current counts."""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path

import click

from ..config.settings import Settings
from ..observability import get_logger, timing_context
from ..pipelines.snapshot_pipeline import SnapshotResult
from .cli_common import CONTEXT_SETTINGS, bootstrap, build_adapter, build_pipeline, env_file_option


async def run_snapshot(settings: Settings, **adapter_kwargs) -> SnapshotResult | None:
    """Run one snapshot; log and swallow any failure."""
    logger = get_logger("app")
    trace_id = str(uuid.uuid4())
    logger.info("Starting main process...")

    try:
        with timing_context("snapshot", trace_id=trace_id):
            async with build_adapter(settings, **adapter_kwargs) as adapter:
                pipeline = build_pipeline(settings, adapter)
                result = await pipeline.run_once(trace_id=trace_id)
    except Exception as exc:
        logger.error(f"An error occurred in the main process: {exc}")
        return None

    logger.success(f"Row appended for {result.row.label}")
    logger.info("Process complete. Exiting.")
    return result


@click.command(
    context_settings=CONTEXT_SETTINGS,
    help="Count contracts for the current instant and append one row",
)
@env_file_option
def cli(env_file: Path | None) -> int:
    """Single-run entry point."""
    settings = bootstrap(env_file)
    if settings is not None:
        asyncio.run(run_snapshot(settings))
    return 0
