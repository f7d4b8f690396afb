"""Logging configuration for junos-templater.

Provides configurable logging with:
- Console output for real-time debugging
- Optional file-based logging with rotation
- Performance timing decorator and context manager for pipeline stages

Environment Variables:
    JUNOS_TEMPLATER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    JUNOS_TEMPLATER_LOG_FILE: Path to log file (default: no file logging)
    JUNOS_TEMPLATER_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    JUNOS_TEMPLATER_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from junos_templater.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("diff")
    def diff(self, old, new):
        ...

    # Or use context manager for sections:
    with timed_section("parse", label="router-a.conf"):
        ...
"""
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("junos_templater.perf")
main_logger = logging.getLogger("junos_templater")


def get_log_level(default: str = "INFO") -> int:
    """Get log level from environment."""
    level_str = os.environ.get("JUNOS_TEMPLATER_LOG_LEVEL", default).upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Optional[Path]:
    """Get log file path from environment, None when file logging is off."""
    path_str = os.environ.get("JUNOS_TEMPLATER_LOG_FILE")
    return Path(path_str) if path_str else None


def setup_logging(level: Optional[str] = None, default: str = "INFO") -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects JUNOS_TEMPLATER_LOG_LEVEL)
    - File handler with rotation when JUNOS_TEMPLATER_LOG_FILE is set
    - Performance logger for timing metrics (console at DEBUG only)

    Args:
        level: Explicit level name; overrides the environment
        default: Level used when neither level nor JUNOS_TEMPLATER_LOG_LEVEL is set
    """
    if level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        log_level = get_log_level(default)
    log_file = get_log_file()

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-40s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler - respects configured level
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.handlers.clear()
    main_logger.addHandler(console_handler)

    if log_file is not None:
        max_size_mb = int(os.environ.get("JUNOS_TEMPLATER_LOG_MAX_SIZE", "10"))
        backup_count = int(os.environ.get("JUNOS_TEMPLATER_LOG_BACKUPS", "5"))

        log_file.parent.mkdir(parents=True, exist_ok=True)

        # File handler - captures DEBUG and above (everything)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(main_format)
        main_logger.addHandler(file_handler)

    main_logger.debug(
        f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}"
    )


def _log_timing(
    operation: str,
    label: Optional[str],
    start: float,
    error: Optional[Exception] = None,
    **extra,
) -> None:
    elapsed = (time.perf_counter() - start) * 1000  # ms
    msg = f"{operation:20s} | {label or 'N/A':15s} | {elapsed:8.2f}ms"
    msg += f" | FAIL: {error}" if error else " | OK"
    if extra:
        msg += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())

    if error:
        perf_logger.warning(msg)
    else:
        perf_logger.debug(msg)


def timed(operation: str, label: Optional[str] = None):
    """Decorator to log execution time of a function.

    Args:
        operation: Name of the operation (e.g., "parse", "diff", "synthesize")
        label: Optional label for the unit of work
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_timing(operation, label, start, e)
                raise
            _log_timing(operation, label, start)
            return result

        return wrapper

    return decorator


@contextmanager
def timed_section(operation: str, label: Optional[str] = None, **extra):
    """Context manager for timing code sections.

    Usage:
        with timed_section("template", label="ge-0/0/1", groups=3):
            ...
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _log_timing(operation, label, start, e, **extra)
        raise
    _log_timing(operation, label, start, **extra)
