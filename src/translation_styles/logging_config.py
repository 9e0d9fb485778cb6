"""
Logging setup shared by the CLI and the HTTP API.

Corpus fragments can be long, so log lines are clipped by `ClippingFormatter`
instead of dumping whole sentences into the log.

Usage:
    from .logging_config import setup_logging
    setup_logging("INFO", Path("logs/styles.log"))
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_MESSAGE_LENGTH = 2000


class ClippingFormatter(logging.Formatter):
    """Formatter that truncates over-long messages."""

    def __init__(self, *args, max_length: int = MAX_MESSAGE_LENGTH, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.max_length = max_length

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if len(formatted) <= self.max_length:
            return formatted
        return f"{formatted[: self.max_length]}... [{len(formatted) - self.max_length} chars clipped]"


def setup_logging(level: str | int = logging.INFO, log_file: Path | None = None) -> Path | None:
    """Configure the root logger with a console handler and an optional file handler."""
    formatter = ClippingFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return log_file
