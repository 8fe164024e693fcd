"""Logging setup for the basin analyzer."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

__all__ = ["configure_logging", "get_logger"]


def configure_logging(*, level: str = "INFO", log_dir: Path | None = None) -> None:
    """Route loguru output to stderr, plus a rotating file when `log_dir` is set."""

    logger.remove()
    logger.add(sys.stderr, level=level, serialize=False)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "basins.log",
            level=level,
            rotation="10 MB",
            retention="10 days",
            encoding="utf-8",
        )


def get_logger():
    """Return the shared loguru logger instance."""

    return logger
