import json
import os
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
import requests

os.environ.setdefault("DOLPHIN_PARSER_LOGS_DIR", tempfile.mkdtemp(prefix="dolphin-parser-logs-"))

from dolphin_parser.config import ClientConfig  # noqa: E402
from dolphin_parser.services import transport  # noqa: E402
from dolphin_parser.services.client import DolphinParserClient  # noqa: E402

ENDPOINT = "https://api.runpod.ai/v2/test-endpoint"


def make_response(status_code: int = 200, body: Any = None, *, text: str | None = None, content: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if content is not None:
        response._content = content
        response.headers["Content-Type"] = "application/zip"
    elif text is not None:
        response._content = text.encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    else:
        response._content = json.dumps(body if body is not None else {}).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    return response


class FakeHttp:
    """Stands in for ``requests.request``; replays queued responses in order."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.queue: list[Any] = []
        self.sleeps: list[float] = []

    def add(self, *items: Any) -> "FakeHttp":
        self.queue.extend(items)
        return self

    def __call__(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHttp:
    fake = FakeHttp()
    monkeypatch.setattr(transport.requests, "request", fake)
    monkeypatch.setattr(transport, "time", SimpleNamespace(sleep=fake.sleeps.append))
    return fake


@pytest.fixture
def config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(
        endpoint=ENDPOINT,
        api_key="secret-key",
        timeout=30,
        retries=3,
        retry_delay=2,
        excluded_labels=["foot", "header"],
        excluded_tags=["author", "meta_pub_date"],
        callback_url="https://app.example.org/hooks/dolphin",
        storage_disk="local",
        storage_path="dolphin-parser",
        storage_root=tmp_path / "storage",
        storage_server_endpoint="https://storage.example.org/upload",
        storage_server_api_key="storage-key",
    )


@pytest.fixture
def client(config: ClientConfig) -> DolphinParserClient:
    return DolphinParserClient(config)
