"""Logging setup driven by the settings file."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import LoggingOptions

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(options: LoggingOptions, log_file: Optional[Path] = None) -> None:
    """Send package logs to the console and, when configured, to a file."""
    level = getattr(logging, (options.level or "INFO").upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
