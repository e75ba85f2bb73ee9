"""Logging setup for the CLI and the HTTP app.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached by :func:`configure_logging`, which the entry points call.
"""
from __future__ import annotations

import logging
import logging.config
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from dolphin_parser.config import settings

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_configured = False


def _build_logging_config(level: str, log_file: Optional[Path]) -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level,
        },
    }
    if log_file is not None:
        handlers["client_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "level": level,
            "filename": str(log_file),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": _LOG_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "dolphin_parser": {
                "handlers": list(handlers),
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(level: Optional[str] = None, logs_dir: Optional[Path] = None, log_to_file: bool = True) -> None:
    """Attach console and rotating-file handlers to the ``dolphin_parser`` logger once."""
    global _configured  # noqa: PLW0603
    if _configured:
        return
    log_file: Optional[Path] = None
    if log_to_file:
        target_dir = Path(logs_dir or settings.logs_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        log_file = target_dir / "dolphin_parser.log"
    logging.config.dictConfig(_build_logging_config(level or settings.log_level, log_file))
    _configured = True


@contextmanager
def log_timing(logger: logging.Logger, operation: str, level: int = logging.INFO):
    start = time.perf_counter()
    try:
        yield
    except Exception:
        duration = time.perf_counter() - start
        logger.warning("%s failed after %.2fs", operation, duration)
        raise
    else:
        duration = time.perf_counter() - start
        logger.log(level, "%s completed in %.2fs", operation, duration)
