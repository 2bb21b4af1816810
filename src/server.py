"""FastAPI server for the TerminPilot agent.

Run with:
    uv run uvicorn src.server:app --reload --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from src.agent import create_booking_agent
from src.api.routes import router, validation_error_handler
from src.catalog import build_settings
from src.config import CORS_ORIGINS, SERVER_HOST, SERVER_PORT

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: build the immutable settings and the graph once ────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Start-up: build settings, tool registry and graph; keep them in app state."""
    settings = build_settings()
    logger.info(
        "Compiling TerminPilot agent (model %s, max %d rounds / %d tool calls)…",
        settings.model_name, settings.max_rounds, settings.max_tool_calls,
    )
    application.state.settings = settings
    application.state.agent = create_booking_agent(settings)
    logger.info("Agent ready.")
    yield


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="TerminPilot Agent",
    description=(
        "Booking assistant for hair salons and painters — availability, "
        "bookings, cancellations, price estimates and confirmations."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID (client-supplied or generated) for log correlation."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router)
app.add_exception_handler(RequestValidationError, validation_error_handler)


# ── CLI entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting TerminPilot API server on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "src.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
