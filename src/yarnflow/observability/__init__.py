"""Observability module for yarnflow.

Provides structured logging to the console and to JSONL files.
"""

from yarnflow.observability.logging import (
    LOG_FILENAME,
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
)

__all__ = [
    "LOG_FILENAME",
    "close_file_logging",
    "configure_logging",
    "get_logger",
    "get_logs_dir",
]
