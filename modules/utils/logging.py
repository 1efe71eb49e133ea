"""Logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from config.settings import AppConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore", "google_genai")


def setup_logging(config: AppConfig) -> logging.Logger:
    """Attach file and console handlers to the root logger.

    Repeated calls keep a single pair of handlers per log file.
    """
    root = logging.getLogger()
    root.setLevel(config.log_level.upper())

    log_file = (Path(config.log_dir) / "application.log").resolve()
    has_file_handler = any(
        isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_file
        for handler in root.handlers
    )
    if not has_file_handler:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in (logging.FileHandler(log_file, encoding="utf-8"), logging.StreamHandler()):
            handler.setFormatter(formatter)
            root.addHandler(handler)

    # SDK transport logs every request at INFO.
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logging.getLogger("imagen_ai")
