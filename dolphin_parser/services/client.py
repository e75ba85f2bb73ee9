"""Client for the Dolphin PDF parser job API.

Usage::

    client = DolphinParserClient()
    job = client.parse_file("/path/to/file.pdf")
    if job.is_success():
        archive = client.download_from_storage(job.job_id)

    pending = client.parse_async(pdf_bytes, {"callback": "https://example.org/hook"})
    client.status(pending.job_id)
"""
from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from dolphin_parser.config import ClientConfig
from dolphin_parser.core.errors import ApiRequestError
from dolphin_parser.logging_utils import log_timing
from dolphin_parser.models.job import JobResult
from dolphin_parser.services import storage
from dolphin_parser.services.transport import is_successful, response_json, send_with_retry

logger = logging.getLogger(__name__)


class DolphinParserClient:
    """Submits PDFs to the remote parser and reads back job state.

    Configuration is resolved once here, from ``config`` when given, otherwise
    from keyword overrides falling back to the environment. The instance holds
    no other state and can be shared between threads.
    """

    def __init__(self, config: ClientConfig | None = None, **overrides: Any) -> None:
        self.config = config or ClientConfig.resolve(overrides)

    # -------- Internal helpers --------
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        kwargs: Dict[str, Any] = {"headers": self._headers(), "timeout": self.config.timeout}
        if payload is not None:
            kwargs["json"] = payload
        response = send_with_retry(
            method,
            f"{self.config.endpoint}{path}",
            attempts=self.config.retries,
            delay=self.config.retry_delay,
            **kwargs,
        )
        if not is_successful(response):
            detail = response.text.strip()
            logger.error(
                "Dolphin Parser %s %s failed with status %s: %s",
                method,
                path,
                response.status_code,
                detail or "(empty response)",
            )
            raise ApiRequestError.request_failed(detail or f"HTTP {response.status_code}", response_json(response))
        return response

    def _run_action(self, action: str, **params: Any) -> Dict[str, Any]:
        logger.info("Running action %s", action)
        with log_timing(logger, f"Action {action}"):
            response = self._request("POST", "/runsync", {"input": {"action": action, **params}})
        body = response_json(response)
        if not isinstance(body, dict):
            return {}
        return body.get("output") or {}

    def build_payload(self, base64_content: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        opts = options or {}

        def pick(key: str, default: Any) -> Any:
            value = opts.get(key)
            return default if value is None else value

        return {
            "pdf_base64": base64_content,
            "excluded_labels": list(pick("excluded_labels", self.config.excluded_labels)),
            "excluded_tags": list(pick("excluded_tags", self.config.excluded_tags)),
            "callback": pick("callback", self.config.callback_url),
        }

    def _submit(self, path: str, base64_content: str, options: Optional[Dict[str, Any]]) -> JobResult:
        payload = self.build_payload(base64_content, options)
        logger.info(
            "Submitting PDF (%d base64 chars) to %s%s, excluded_labels=%s, excluded_tags=%s, callback=%s",
            len(base64_content),
            self.config.endpoint,
            path,
            payload["excluded_labels"],
            payload["excluded_tags"],
            bool(payload["callback"]),
        )
        with log_timing(logger, f"Submission to {path}"):
            response = self._request("POST", path, {"input": payload})
        job = JobResult.from_response(response_json(response))
        logger.info("Job %s reported status %s", job.job_id or "<unknown>", job.status)
        return job

    # -------- Submission --------
    def parse_base64(self, base64_content: str, options: Optional[Dict[str, Any]] = None) -> JobResult:
        """Parse already-encoded PDF content and wait for the result."""
        return self._submit("/runsync", base64_content, options)

    def parse_base64_async(self, base64_content: str, options: Optional[Dict[str, Any]] = None) -> JobResult:
        """Queue already-encoded PDF content; poll with :meth:`status`."""
        return self._submit("/run", base64_content, options)

    def parse(self, pdf_bytes: bytes, options: Optional[Dict[str, Any]] = None) -> JobResult:
        """Parse a PDF synchronously.

        ``options`` may override ``excluded_labels``, ``excluded_tags`` and
        ``callback`` for this call only.
        """
        return self.parse_base64(base64.b64encode(pdf_bytes).decode("ascii"), options)

    def parse_async(self, pdf_bytes: bytes, options: Optional[Dict[str, Any]] = None) -> JobResult:
        """Queue a PDF for parsing and return as soon as the job is accepted."""
        return self.parse_base64_async(base64.b64encode(pdf_bytes).decode("ascii"), options)

    def parse_file(self, file_path: str | Path, options: Optional[Dict[str, Any]] = None) -> JobResult:
        return self.parse(Path(file_path).read_bytes(), options)

    def parse_file_async(self, file_path: str | Path, options: Optional[Dict[str, Any]] = None) -> JobResult:
        return self.parse_async(Path(file_path).read_bytes(), options)

    # -------- Jobs --------
    def status(self, job_id: str) -> JobResult:
        response = self._request("GET", f"/status/{job_id}")
        return JobResult.from_response(response_json(response))

    def cancel(self, job_id: str) -> Dict[str, Any]:
        return self._run_action("stop_job", job_id=job_id)

    def get_result(self, job_id: str) -> Dict[str, Any]:
        return self._run_action("get_result", job_id=job_id)

    def list_jobs(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """List jobs; ``options`` may carry ``statuses``, ``limit`` and ``offset``."""
        params = {key: value for key, value in (options or {}).items() if key != "action"}
        return self._run_action("list_jobs", **params)

    # -------- Service --------
    def health(self) -> Dict[str, Any]:
        return self._run_action("health")

    def stats(self) -> Dict[str, Any]:
        return self._run_action("stats")

    def check_storage(self) -> Dict[str, Any]:
        return self._run_action("check_storage")

    # -------- Storage server --------
    def download_from_storage(self, job_id: str, keep: bool = False) -> Path:
        """Fetch the job's result archive and store it as ``{storage_path}/{job_id}.zip``.

        Issued once, without retries. Returns the local path of the stored file.
        """
        endpoint = self.config.storage_server_endpoint
        if not endpoint:
            raise ApiRequestError.request_failed("Storage server not configured")

        base_url = endpoint.rstrip("/")
        if base_url.endswith("/upload"):
            base_url = base_url[: -len("/upload")]
        url = f"{base_url}/download/{job_id}" + ("?keep=true" if keep else "")

        relative_path = f"{self.config.storage_path.strip('/')}/{job_id}.zip"
        disk = storage.get_disk(self.config.storage_disk, self.config.storage_root)
        try:
            disk.path(relative_path)
        except ValueError as exc:
            raise ApiRequestError.request_failed(f"Invalid job id for storage: {job_id!r}") from exc

        logger.info("Downloading archive for job %s from storage server (keep=%s)", job_id, keep)
        with log_timing(logger, f"Storage download for {job_id}"):
            response = requests.get(
                url,
                headers={"X-API-Key": self.config.storage_server_api_key},
                timeout=self.config.timeout,
            )
        if not is_successful(response):
            raise ApiRequestError.request_failed(
                f"Failed to download from storage: {response.status_code}",
                response_json(response),
            )
        return disk.put(relative_path, response.content)

    def get_config(self) -> Dict[str, Any]:
        return self.config.public_view()
