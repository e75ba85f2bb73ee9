"""Parser job endpoints backed by the injected client."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from dolphin_parser.api.dependencies import get_client
from dolphin_parser.api.schemas import ActionResponse, CallbackAck, ParseOptions
from dolphin_parser.models.job import JobResult
from dolphin_parser.services.client import DolphinParserClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dolphin", tags=["dolphin-parser"])

CallbackHandler = Callable[[JobResult], None]


def _log_callback(job: JobResult) -> None:
    logger.info(
        "Callback for job %s: status=%s zip_url=%s error=%s",
        job.job_id or "<unknown>",
        job.status,
        job.zip_url,
        job.error,
    )


def get_callback_handler() -> CallbackHandler:
    return _log_callback


def _parse_options(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        options = ParseOptions(**json.loads(raw))
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Invalid options JSON") from exc
    except (TypeError, ValidationError) as exc:
        raise HTTPException(status_code=400, detail="Invalid options schema") from exc
    return options.model_dump(exclude_none=True)


@router.post("/parse", response_model=JobResult)
def parse_upload(
    file: UploadFile = File(...),
    async_mode: bool = Form(False),
    options: Optional[str] = Form(None),
    client: DolphinParserClient = Depends(get_client),
) -> JobResult:
    parse_options = _parse_options(options)
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    logger.info("Received %s (%d bytes), async_mode=%s", file.filename, len(content), async_mode)
    if async_mode:
        return client.parse_async(content, parse_options)
    return client.parse(content, parse_options)


@router.get("/jobs/{job_id}", response_model=JobResult)
def job_status(job_id: str, client: DolphinParserClient = Depends(get_client)) -> JobResult:
    return client.status(job_id)


@router.post("/jobs/{job_id}/cancel", response_model=ActionResponse)
def cancel_job(job_id: str, client: DolphinParserClient = Depends(get_client)) -> ActionResponse:
    return ActionResponse(job_id=job_id, output=client.cancel(job_id))


@router.get("/jobs/{job_id}/result", response_model=ActionResponse)
def job_result(job_id: str, client: DolphinParserClient = Depends(get_client)) -> ActionResponse:
    return ActionResponse(job_id=job_id, output=client.get_result(job_id))


@router.get("/health", response_model=ActionResponse)
def parser_health(client: DolphinParserClient = Depends(get_client)) -> ActionResponse:
    return ActionResponse(output=client.health())


@router.post("/callback", response_model=CallbackAck)
def receive_callback(
    payload: Dict[str, Any] = Body(...),
    handler: CallbackHandler = Depends(get_callback_handler),
) -> CallbackAck:
    # The service posts either the bare job output or the full job envelope.
    # A bare output carries job_id at the top level; an envelope carries id.
    is_envelope = "id" in payload or ("job_id" not in payload and isinstance(payload.get("output"), Mapping))
    data = payload if is_envelope else {"output": payload}
    job = JobResult.from_response(data)
    handler(job)
    return CallbackAck(job_id=job.job_id, status=job.status)
