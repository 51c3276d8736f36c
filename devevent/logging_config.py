"""Logging configuration for the application."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single stdout handler to the root logger."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if not any(getattr(h, "_devevent", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(_FORMAT))
        console_handler._devevent = True
        root_logger.addHandler(console_handler)

    # Noisy third-party loggers
    logging.getLogger("dateparser").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
