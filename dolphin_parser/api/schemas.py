"""HTTP schemas for the parser routes."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    status: str = Field(default="failure")
    error_code: str
    error_status: int
    message: str
    context: Dict[str, Any] | None = None


class ParseOptions(BaseModel):
    """Per-request overrides of the client defaults."""

    excluded_labels: Optional[List[str]] = Field(
        default=None,
        description="Layout labels to drop from the parsed output, e.g. ['foot', 'header'].",
    )
    excluded_tags: Optional[List[str]] = Field(
        default=None,
        description="Metadata tags to drop from the parsed output, e.g. ['author'].",
    )
    callback: Optional[str] = Field(
        default=None,
        description="URL the parser POSTs the finished job to.",
    )


class ActionResponse(BaseModel):
    job_id: Optional[str] = None
    output: Dict[str, Any] = Field(default_factory=dict)


class CallbackAck(BaseModel):
    received: bool = True
    job_id: str
    status: str
