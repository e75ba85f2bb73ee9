from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dolphin_parser import __version__
from dolphin_parser.api.routes_jobs import router as jobs_router
from dolphin_parser.api.schemas import ErrorEnvelope
from dolphin_parser.core.errors import DolphinParserError
from dolphin_parser.logging_utils import configure_logging


async def parser_error_handler(_: Request, exc: DolphinParserError):
    payload = ErrorEnvelope(**exc.to_response())
    return JSONResponse(status_code=exc.error.status.value, content=payload.model_dump())


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Dolphin Parser Gateway", version=__version__)
    app.include_router(jobs_router)
    app.add_exception_handler(DolphinParserError, parser_error_handler)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app
