"""Content agent API router."""
from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.db import connection
from backend.errors import AgentError
from backend.models import AgentRequest
from backend.observability import record_analysis, start_span
from backend.services.content_agent import AGENT_ACTIONS, ContentAgentService

agent_router = APIRouter(prefix="/api/content-agent", tags=["content-agent"])
logger = logging.getLogger("docready.agent")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg', 'invalid')}" if location else str(error.get("msg", "invalid")))
    return "Invalid request: " + ("; ".join(problems) or "malformed body")


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same ``{"error": message}`` shape as every other failure."""
    message = _validation_message(exc)
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    return _error_response(400, message)


@agent_router.post("")
async def run_agent_action(payload: AgentRequest) -> Any:
    """Dispatch one content agent action.

    Success bodies carry ``success: true``; every failure is a single
    ``{"error": message}`` object with a non-2xx status.
    """
    # Client-supplied names never become metric labels.
    action_label = payload.action if payload.action in AGENT_ACTIONS else "unknown"
    started = time.monotonic()
    result = "error"
    try:
        db = await connection.get_connection()
        service = ContentAgentService(db)
        with start_span("content_agent.action", {"agent.action": action_label}):
            response = await service.run(payload)
        result = "ok"
        return response
    except AgentError as exc:
        logger.warning("Content agent action %s rejected: %s", action_label, exc.message)
        return _error_response(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Content agent action %s failed", action_label)
        return _error_response(500, str(exc) or "Unknown error occurred")
    finally:
        record_analysis(action_label, result, (time.monotonic() - started) * 1000)
