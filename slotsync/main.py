"""SlotSync service entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .observability import RequestMetricsMiddleware
from .routers import api_router
from .utils.errors import PreconditionViolationError
from .utils.logging import configure_logging

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise logging and announce the active realignment settings."""

    configure_logging()
    settings = get_settings()
    logger.info(
        "[SlotSync] validate_inputs=%s max_edits=%s trace=%s",
        settings.realign_validate_inputs,
        settings.realign_max_edits or "auto",
        settings.realign_trace,
    )
    yield


app = FastAPI(title="SlotSync", version=__version__, lifespan=lifespan)
app.add_middleware(RequestMetricsMiddleware)
app.include_router(api_router)


@app.exception_handler(PreconditionViolationError)
async def handle_precondition_violation(
    request: Request, exc: PreconditionViolationError
) -> JSONResponse:
    """Report malformed sequences that escaped route-level handling."""

    return JSONResponse(
        status_code=422,
        content={"detail": {"code": exc.code, "message": str(exc), "extra": exc.extra}},
    )


@app.exception_handler(Exception)
async def handle_unexpected_exception(
    request: Request, exc: Exception
) -> JSONResponse:
    """Ensure unexpected exceptions return a JSON payload."""

    logger.exception(
        "Unhandled exception while processing %s %s", request.method, request.url.path
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
    )


__all__ = ["app"]
