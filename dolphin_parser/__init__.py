"""Client for the Dolphin PDF parser job API."""
from __future__ import annotations

from .config import ClientConfig, Settings
from .core.errors import ApiRequestError, ConfigurationError, DolphinParserError, ErrorKind
from .models.job import JobResult
from .services.client import DolphinParserClient

__all__ = [
    "ApiRequestError",
    "ClientConfig",
    "ConfigurationError",
    "DolphinParserClient",
    "DolphinParserError",
    "ErrorKind",
    "JobResult",
    "Settings",
]

__version__ = "0.1.0"
