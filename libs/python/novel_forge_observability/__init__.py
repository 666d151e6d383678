"""Shared observability helpers used across Novel Forge services."""

from .logging import current_log_context, log_context, setup_logging
from .metrics import (
    observe_completion,
    observe_quality_outcome,
    observe_stage_duration,
    setup_fastapi_metrics,
)

__all__ = [
    "setup_logging",
    "log_context",
    "current_log_context",
    "setup_fastapi_metrics",
    "observe_stage_duration",
    "observe_quality_outcome",
    "observe_completion",
]
