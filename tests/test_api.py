import json

import pytest
from fastapi.testclient import TestClient

from conftest import make_response
from dolphin_parser.api.app import create_app
from dolphin_parser.api.dependencies import get_client
from dolphin_parser.api.routes_jobs import get_callback_handler
from dolphin_parser.core.errors import ConfigurationError
from dolphin_parser.services.client import DolphinParserClient


@pytest.fixture
def api(client: DolphinParserClient) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_client] = lambda: client
    return TestClient(app)


def test_parse_upload_sync(api: TestClient, fake_http) -> None:
    fake_http.add(make_response(200, {"output": {"status": "SUCCESS", "job_id": "j1", "zip_url": "https://s/j1.zip"}}))

    response = api.post(
        "/dolphin/parse",
        files={"file": ("doc.pdf", b"%PDF-1.7", "application/pdf")},
        data={"options": json.dumps({"excluded_labels": ["foot"]})},
    )

    assert response.status_code == 200
    assert response.json()["job_id"] == "j1"
    assert response.json()["zip_url"] == "https://s/j1.zip"
    assert fake_http.calls[0]["url"].endswith("/runsync")
    assert fake_http.calls[0]["json"]["input"]["excluded_labels"] == ["foot"]


def test_parse_upload_async(api: TestClient, fake_http) -> None:
    fake_http.add(make_response(200, {"id": "j2", "status": "IN_QUEUE"}))

    response = api.post(
        "/dolphin/parse",
        files={"file": ("doc.pdf", b"%PDF-1.7", "application/pdf")},
        data={"async_mode": "true"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "IN_QUEUE"
    assert fake_http.calls[0]["url"].endswith("/run")


def test_parse_upload_rejects_bad_options(api: TestClient, fake_http) -> None:
    response = api.post(
        "/dolphin/parse",
        files={"file": ("doc.pdf", b"%PDF-1.7", "application/pdf")},
        data={"options": "{not json"},
    )

    assert response.status_code == 400
    assert fake_http.calls == []


def test_api_error_is_rendered_as_envelope(api: TestClient, fake_http) -> None:
    fake_http.add(*[make_response(404, {"error": "job not found"}) for _ in range(3)])

    response = api.get("/dolphin/jobs/missing")

    assert response.status_code == 502
    body = response.json()
    assert body["status"] == "failure"
    assert body["error_code"] == "ERR_API_REQUEST"
    assert body["context"] == {"response": {"error": "job not found"}}


def test_configuration_error_is_rendered_as_envelope() -> None:
    def unconfigured() -> DolphinParserClient:
        raise ConfigurationError.missing_endpoint()

    app = create_app()
    app.dependency_overrides[get_client] = unconfigured

    response = TestClient(app).get("/dolphin/health")

    assert response.status_code == 500
    assert response.json()["error_code"] == "ERR_CONFIGURATION"
    assert "DOLPHIN_PARSER_ENDPOINT" in response.json()["message"]


def test_cancel_and_result_return_output(api: TestClient, fake_http) -> None:
    fake_http.add(
        make_response(200, {"output": {"stopped": True}}),
        make_response(200, {"output": {"markdown": "# Doc"}}),
    )

    cancelled = api.post("/dolphin/jobs/j3/cancel")
    result = api.get("/dolphin/jobs/j3/result")

    assert cancelled.json() == {"job_id": "j3", "output": {"stopped": True}}
    assert result.json() == {"job_id": "j3", "output": {"markdown": "# Doc"}}


def test_callback_is_mapped_and_handled() -> None:
    received = []
    app = create_app()
    app.dependency_overrides[get_callback_handler] = lambda: received.append

    response = TestClient(app).post(
        "/dolphin/callback",
        json={"status": "SUCCESS", "job_id": "j4", "zip_url": "https://s/j4.zip", "pages_total": 3},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True, "job_id": "j4", "status": "SUCCESS"}
    assert received[0].zip_url == "https://s/j4.zip"
    assert received[0].pages_total == 3


def test_callback_accepts_full_envelope() -> None:
    response = TestClient(create_app()).post(
        "/dolphin/callback",
        json={"id": "rp-5", "status": "COMPLETED", "output": {"status": "FAILED", "job_id": "j5"}},
    )

    assert response.json()["status"] == "FAILED"
    assert response.json()["job_id"] == "j5"


def test_app_health() -> None:
    assert TestClient(create_app()).get("/health").json() == {"status": "ok"}


def test_callback_bare_output_with_nested_output_keeps_job_fields() -> None:
    received = []
    app = create_app()
    app.dependency_overrides[get_callback_handler] = lambda: received.append

    response = TestClient(app).post(
        "/dolphin/callback",
        json={"status": "SUCCESS", "job_id": "j4", "zip_url": "https://s/j4.zip", "output": {"markdown": "# T"}},
    )

    assert response.json() == {"received": True, "job_id": "j4", "status": "SUCCESS"}
    assert received[0].zip_url == "https://s/j4.zip"
    assert received[0].output == {"markdown": "# T"}
