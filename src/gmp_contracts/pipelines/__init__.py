"""Run orchestration: single snapshots and daily backfills."""

from .snapshot_pipeline import (
    BackfillPacer,
    BackfillResult,
    SnapshotPipeline,
    SnapshotPipelineConfig,
    SnapshotResult,
    create_snapshot_pipeline,
    iter_backfill_days,
)

__all__ = [
    "BackfillPacer",
    "BackfillResult",
    "SnapshotPipeline",
    "SnapshotPipelineConfig",
    "SnapshotResult",
    "create_snapshot_pipeline",
    "iter_backfill_days",
]
