"""Typed view over the job API's response payloads."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

PROCESSING_STATUSES = frozenset({"PENDING", "PROCESSING", "IN_QUEUE", "IN_PROGRESS"})

# (field, key inside "output")
_OUTPUT_FIELDS = (
    ("message", "message"),
    ("zip_url", "zip_url"),
    ("pages_total", "pages_total"),
    ("pages_processed", "pages_processed"),
    ("figures_count", "figures_count"),
    ("callback_sent_status", "callback_sent_status"),
    ("callback_error", "callback_error"),
    ("error", "error"),
    ("output", "output"),
)

# (field, top-level key)
_ENVELOPE_FIELDS = (
    ("delay_time", "delayTime"),
    ("execution_time", "executionTime"),
    ("worker_id", "workerId"),
)


def _first_present(*candidates: Any) -> Any:
    for value in candidates:
        if value is not None:
            return value
    return None


class JobResult(BaseModel):
    """One parsing job as reported by the remote service.

    Fields the response did not carry stay unset: they read as ``None`` but are
    missing from ``model_fields_set``, so ``to_dict(exclude_unset=True)`` only
    returns what the service actually sent.
    """

    model_config = ConfigDict(frozen=True)

    status: str = "UNKNOWN"
    job_id: str = ""
    message: Optional[str] = None
    zip_url: Optional[str] = None
    pages_total: Optional[int] = None
    pages_processed: Optional[int] = None
    figures_count: Optional[int] = None
    callback_sent_status: Optional[str] = None
    callback_error: Optional[str] = None
    error: Optional[str] = None
    output: Any = None
    delay_time: Optional[float] = None
    execution_time: Optional[float] = None
    worker_id: Optional[str] = None

    @classmethod
    def from_response(cls, data: Mapping[str, Any] | None) -> "JobResult":
        data = data or {}
        output = data.get("output")
        if not isinstance(output, Mapping):
            output = {}

        values: Dict[str, Any] = {}
        status = _first_present(output.get("status"), data.get("status"))
        if status is not None:
            values["status"] = str(status)
        job_id = _first_present(output.get("job_id"), data.get("id"))
        if job_id is not None:
            values["job_id"] = str(job_id)
        for field, key in _OUTPUT_FIELDS:
            if output.get(key) is not None:
                values[field] = output[key]
        for field, key in _ENVELOPE_FIELDS:
            if data.get(key) is not None:
                values[field] = data[key]
        return cls(**values)

    def is_success(self) -> bool:
        return self.status.upper() == "SUCCESS"

    def is_failed(self) -> bool:
        return self.status.upper() == "FAILED"

    def is_processing(self) -> bool:
        return self.status.upper() in PROCESSING_STATUSES

    def callback_was_sent(self) -> bool:
        return self.callback_sent_status == "SENT"

    def to_dict(self, exclude_unset: bool = False) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=exclude_unset)
