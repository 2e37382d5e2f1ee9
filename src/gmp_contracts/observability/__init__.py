"""Observability module for the contracts tracker.

Provides loguru configuration, component loggers and timing instrumentation.
"""

from .loguru_config import (
    COMPONENTS,
    SilentLogger,
    StatusLogger,
    configure_loguru,
    get_logger,
    timing_context,
)

__all__ = [
    "COMPONENTS",
    "SilentLogger",
    "StatusLogger",
    "configure_loguru",
    "get_logger",
    "timing_context",
]
