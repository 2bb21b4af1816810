"""FastAPI route definitions for the TerminPilot agent API."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from src.agent import run_chat
from src.api.schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse
from src.errors import ModelServiceError, ModelTimeoutError, RoundLimitExceeded

logger = logging.getLogger(__name__)

router = APIRouter()

# Loop-level failures and the status they map to; most specific first
_ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (ModelTimeoutError, 504),
    (ModelServiceError, 502),
    (RoundLimitExceeded, 500),
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies in the ``{ok: false, error}`` shape."""
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    request_id = getattr(request.state, "request_id", "?")
    logger.info("[%s] Rejected request body: %s", request_id, problems)
    return _error(422, "Invalid request: " + "; ".join(problems))


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness probe."""
    return "TerminPilot Agent is running."


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ErrorResponse}, 502: {"model": ErrorResponse},
               503: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def chat(request: ChatRequest, http_request: Request):
    """Run the tool-call loop for one message and return the final reply.

    Each request gets a fresh conversation session.  The graph run blocks on
    the model API, so it is offloaded to a worker thread to keep the event
    loop free for other requests.
    """
    agent = getattr(http_request.app.state, "agent", None)
    settings = getattr(http_request.app.state, "settings", None)
    if agent is None or settings is None:
        return _error(503, "The agent is still starting up. Please try again in a moment.")

    request_id = getattr(http_request.state, "request_id", "?")

    try:
        reply = await asyncio.to_thread(run_chat, agent, request.user_message, settings)
    except (RoundLimitExceeded, ModelServiceError) as exc:
        status_code = next(code for cls, code in _ERROR_STATUS if isinstance(exc, cls))
        logger.error("[%s] Chat failed (%s): %s", request_id, type(exc).__name__, exc)
        return _error(status_code, f"{type(exc).__name__}: {exc}")
    except Exception:
        # Full traceback stays server-side
        logger.exception("[%s] Error processing chat request", request_id)
        return _error(500, "An internal error occurred. Please try again.")

    return ChatResponse(reply=reply)
