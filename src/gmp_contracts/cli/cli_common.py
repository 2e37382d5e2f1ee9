"""Common CLI utilities: settings bootstrap and pipeline wiring.

Runtime failures never change the exit code; they are logged and the command
returns 0.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from ..adapters.gmp.adapter import GMPStatsAdapter, create_gmp_adapter
from ..adapters.sink import RowSink, create_sink
from ..config.settings import ConfigError, Settings, load_settings
from ..observability import configure_loguru, get_logger
from ..pipelines.snapshot_pipeline import SnapshotPipeline, create_snapshot_pipeline

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

env_file_option = click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to .env file (default: ./.env)",
)


def bootstrap(env_file: Path | None = None) -> Settings | None:
    """Load settings and configure logging.

    Returns None (after logging the problem) when configuration is invalid.
    """
    try:
        settings = load_settings(env_file)
        configure_loguru(log_dir=settings.log_dir, level=settings.log_level)
    except (ConfigError, OSError, ValueError) as exc:
        get_logger("app").error(f"Configuration error: {exc}")
        return None

    return settings


def build_adapter(settings: Settings, **kwargs: Any) -> GMPStatsAdapter:
    """GMPStats adapter configured from settings."""
    return create_gmp_adapter(
        mainnet_url=settings.mainnet_url,
        testnet_url=settings.testnet_url,
        timeout=settings.request_timeout,
        **kwargs,
    )


def build_pipeline(
    settings: Settings,
    adapter: GMPStatsAdapter,
    sink: RowSink | None = None,
) -> SnapshotPipeline:
    """Snapshot pipeline configured from settings."""
    log_path = settings.log_dir / "pipelines" / "snapshot.jsonl" if settings.log_dir else None

    return create_snapshot_pipeline(
        counter=adapter,
        sink=sink if sink is not None else create_sink(settings),
        log_path=log_path,
        timezone=settings.timezone,
        all_time_origin=settings.all_time_origin,
        backfill_start=settings.backfill_start,
        backfill_delay=settings.backfill_delay,
        backfill_max_delay=settings.backfill_max_delay,
    )
