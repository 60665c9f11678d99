"""Logging initialization using loguru."""

from __future__ import annotations

from pathlib import Path

from appdirs import user_log_dir
from loguru import logger

APP_NAME = "Geolocate"


def get_log_directory() -> Path:
    """Per-user directory that holds the rotating log files."""
    return Path(user_log_dir(appname=APP_NAME, appauthor=False))


def init_logging(log_dir: str | Path | None = None, level: str = "INFO") -> Path:
    """Initialize rotating file logging under the given directory.

    Worker threads log through the same sink, so the sink is enqueued.
    """
    log_path = Path(log_dir) if log_dir is not None else get_log_directory()
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "geolocate_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    return log_path
