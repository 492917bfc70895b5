"""Configuration management for the planner dashboard.

This module centralizes all configuration values including paths,
the storage key, logging setup and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in planner_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("ZENITH_DATA_DIR", _PROJECT_ROOT / "data"))
STATE_DIR = DATA_DIR / "state"

# Storage
STORAGE_KEY = "zenith_planner_final"
STORAGE_BACKEND = os.getenv("ZENITH_STORAGE_BACKEND", "json").strip().lower()
DB_PATH = Path(
    os.getenv("ZENITH_DB_PATH", DATA_DIR / "planner.db")
).resolve()

# Logging
LOG_LEVEL = os.getenv("ZENITH_LOG_LEVEL", "INFO").upper()
LOG_FILE: Optional[str] = os.getenv("ZENITH_LOG_FILE") or None
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOGGING_CONFIGURED = False


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, STATE_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the root logger once per process.

    Streamlit re-executes the app script on every interaction, so repeated
    calls are ignored after the first one.
    """
    global _LOGGING_CONFIGURED
    logger = logging.getLogger()
    if _LOGGING_CONFIGURED:
        return logger

    logger.setLevel(level or LOG_LEVEL)
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    target = log_file or LOG_FILE
    if target:
        Path(target).parent.mkdir(exist_ok=True, parents=True)
        file_handler = RotatingFileHandler(
            target, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _LOGGING_CONFIGURED = True
    return logger
