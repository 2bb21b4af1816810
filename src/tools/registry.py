"""Tool registry: maps a tool name to a typed handler and runs it.

``dispatch`` never raises for tool-level problems.  Malformed arguments,
unknown tool names and handler crashes all come back as a ``ToolError`` so the
orchestration loop can hand them to the model like any other result.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from src.catalog import AgentSettings
from src.errors import (
    ArgumentParseError,
    DispatchInternalError,
    ToolDispatchError,
    UnknownToolError,
)
from src.services.metrics import metrics
from src.tools.booking import cancel_booking, create_booking, get_availability, send_message
from src.tools.pricing import get_price_estimate
from src.tools.schemas import (
    CancelBookingArgs,
    CreateBookingArgs,
    GetAvailabilityArgs,
    PriceEstimateArgs,
    SendMessageArgs,
    ToolModel,
)

logger = logging.getLogger(__name__)

MAX_PARALLEL_DISPATCH = 8


# ── Call / result types ──────────────────────────────────────────────


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model within one round."""

    id: str
    name: str
    # Raw JSON text, an already-parsed mapping, or nothing at all
    arguments: str | Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ToolResult:
    call_id: str
    name: str
    payload: dict[str, Any]

    is_error = False

    def to_content(self) -> str:
        return json.dumps(self.payload, ensure_ascii=False)


@dataclass(frozen=True)
class ToolError:
    call_id: str
    name: str
    message: str
    error_type: str

    is_error = True

    def to_content(self) -> str:
        return json.dumps({"error": self.message}, ensure_ascii=False)


DispatchOutcome = ToolResult | ToolError


@dataclass(frozen=True)
class ToolHandler:
    """Argument model plus the function that executes the tool."""

    args_model: type[BaseModel]
    fn: Callable[[Any, AgentSettings], ToolModel | dict[str, Any]]


HANDLERS: Mapping[str, ToolHandler] = {
    "getAvailability": ToolHandler(GetAvailabilityArgs, get_availability),
    "createBooking": ToolHandler(CreateBookingArgs, create_booking),
    "cancelBooking": ToolHandler(CancelBookingArgs, cancel_booking),
    "getPriceEstimate": ToolHandler(PriceEstimateArgs, get_price_estimate),
    "sendMessage": ToolHandler(SendMessageArgs, send_message),
}


# ── Argument normalisation ───────────────────────────────────────────


def parse_arguments(tool_name: str, raw: str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Turn a raw argument payload into a dict, or raise ``ArgumentParseError``."""
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str):
        raise ArgumentParseError(
            tool_name, f"Arguments for {tool_name} must be a JSON object, got {type(raw).__name__}",
        )
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ArgumentParseError(
            tool_name, f"Arguments for {tool_name} are not valid JSON: {exc.msg}",
        ) from exc
    if not isinstance(parsed, dict):
        raise ArgumentParseError(
            tool_name, f"Arguments for {tool_name} must be a JSON object, got {type(parsed).__name__}",
        )
    return parsed


def _format_validation_error(tool_name: str, exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "(root)"
        problems.append(f"{loc}: {err['msg']}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(problems)


# ── Registry ─────────────────────────────────────────────────────────


class ToolRegistry:
    """Executes catalog tools by name.

    The handler table is resolved once at construction from the catalog in
    ``settings``; every catalog tool must have a handler.
    """

    def __init__(
        self,
        settings: AgentSettings,
        handlers: Mapping[str, ToolHandler] | None = None,
    ):
        available = handlers if handlers is not None else HANDLERS
        missing = [name for name in settings.tool_names if name not in available]
        if missing:
            raise ValueError(f"No handler registered for catalog tools: {missing}")

        self._settings = settings
        self._handlers: dict[str, ToolHandler] = {
            name: available[name] for name in settings.tool_names
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, call: ToolCall) -> DispatchOutcome:
        """Run one tool call and return its result or a structured error."""
        t0 = time.perf_counter()
        try:
            payload = self._execute(call)
        except ToolDispatchError as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                "tools", call.name, error_type=type(exc).__name__, latency_ms=elapsed,
            )
            logger.info("Tool %s (%s) failed: %s", call.name, call.id, exc)
            return ToolError(
                call_id=call.id,
                name=call.name,
                message=str(exc),
                error_type=type(exc).__name__,
            )

        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_success("tools", call.name, latency_ms=elapsed)
        logger.debug("Tool %s (%s) succeeded in %.1fms", call.name, call.id, elapsed)
        return ToolResult(call_id=call.id, name=call.name, payload=payload)

    def dispatch_many(self, calls: Sequence[ToolCall]) -> list[DispatchOutcome]:
        """Dispatch a round of calls; results come back in call order."""
        if len(calls) <= 1:
            return [self.dispatch(call) for call in calls]
        workers = min(len(calls), MAX_PARALLEL_DISPATCH)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tool") as pool:
            return list(pool.map(self.dispatch, calls))

    def _execute(self, call: ToolCall) -> dict[str, Any]:
        handler = self._handlers.get(call.name)
        if handler is None:
            raise UnknownToolError(call.name)

        raw_args = parse_arguments(call.name, call.arguments)
        try:
            args = handler.args_model.model_validate(raw_args)
        except ValidationError as exc:
            raise ArgumentParseError(call.name, _format_validation_error(call.name, exc)) from exc

        try:
            result = handler.fn(args, self._settings)
        except Exception as exc:
            logger.exception("Tool handler %s raised", call.name)
            raise DispatchInternalError(
                call.name, f"{call.name} failed: {type(exc).__name__}: {exc}",
            ) from exc

        if isinstance(result, ToolModel):
            return result.to_payload()
        return dict(result)
