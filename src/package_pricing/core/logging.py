"""Logging helpers."""
from __future__ import annotations

import logging
from pathlib import Path

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def configure_logging(level: str, log_dir: Path, *, filename: str = "pricing.log") -> Path:
    """Log to stderr and ``log_dir/filename``; returns the log file path."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    resolved = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path),
        ],
        force=True,
    )
    if resolved > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
