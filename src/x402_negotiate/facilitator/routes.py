"""FastAPI routes exposing a FacilitatorDispatcher over HTTP."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..interfaces import FacilitatorHandler
from .dispatcher import DispatchResult, FacilitatorDispatcher

logger = logging.getLogger(__name__)


class _InvalidJSON(Exception):
    pass


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise _InvalidJSON(str(e)) from e


def _respond(result: DispatchResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


def create_facilitator_router(
    handlers: Sequence[FacilitatorHandler] | FacilitatorDispatcher,
    logger: logging.Logger | None = None,
) -> APIRouter:
    """Create a router with the facilitator endpoints.

    Endpoints:
        POST /accepts: complete candidate requirements.
        POST /settle: settle a payment.
        POST /verify: verify a payment.
        GET /supported: supported kinds and signers.

    Args:
        handlers: Handlers in priority order, or a prepared dispatcher.
        logger: Logger for the dispatcher when one is built here.

    Returns:
        APIRouter to include in a FastAPI app.
    """
    if isinstance(handlers, FacilitatorDispatcher):
        dispatcher = handlers
    else:
        dispatcher = FacilitatorDispatcher(handlers, logger=logger)

    router = APIRouter()

    @router.post("/accepts")
    async def accepts(request: Request) -> JSONResponse:
        try:
            body = await _read_json(request)
        except _InvalidJSON as e:
            return JSONResponse(status_code=400, content={"error": f"invalid JSON: {e}"})
        return _respond(await dispatcher.accepts(body))

    @router.post("/settle")
    async def settle(request: Request) -> JSONResponse:
        try:
            body = await _read_json(request)
        except _InvalidJSON as e:
            return JSONResponse(
                status_code=400,
                content={"success": False, "errorReason": f"invalid JSON: {e}"},
            )
        return _respond(await dispatcher.settle(body))

    @router.post("/verify")
    async def verify(request: Request) -> JSONResponse:
        try:
            body = await _read_json(request)
        except _InvalidJSON as e:
            return JSONResponse(
                status_code=400,
                content={"isValid": False, "invalidReason": f"invalid JSON: {e}"},
            )
        return _respond(await dispatcher.verify(body))

    @router.get("/supported")
    async def supported() -> JSONResponse:
        return _respond(await dispatcher.supported())

    return router
