"""FastAPI dependencies providing the parser client."""
from __future__ import annotations

from functools import lru_cache

from dolphin_parser.services.client import DolphinParserClient


@lru_cache(maxsize=1)
def get_client() -> DolphinParserClient:
    """One client per process, built on first use from the environment.

    Override with ``app.dependency_overrides[get_client]`` to inject another
    configuration.
    """
    return DolphinParserClient()
