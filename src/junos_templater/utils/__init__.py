"""Utility modules for logging and timing helpers."""
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
)

__all__ = [
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
]
