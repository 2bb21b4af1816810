"""LangGraph-based tool-call orchestration loop for TerminPilot.

Architecture:
  A two-node StateGraph over a request-scoped ``SessionState``:

    1. **model** — sends the system prompt, the tool catalog and the session
                   transcript to Claude and appends its reply
    2. **tools** — dispatches every tool call in that reply through the
                   ``ToolRegistry`` and appends one result per call

  Routing:
    model → (has tool calls?) → tools → model (loop)
          → (final answer?)   → END

  Termination:
    The loop is bounded by ``max_rounds`` model calls and ``max_tool_calls``
    tool dispatches.  When the model still asks for tools past either ceiling,
    the tools node raises ``RoundLimitExceeded`` instead of looping on.  Each
    model call is bounded by ``round_timeout_seconds`` and is not retried.

  Tool failures (bad arguments, unknown tools, crashing handlers) never stop
  the loop: they come back to the model as error results in the next round.
"""

from __future__ import annotations

import logging
import time

import anthropic
from langchain_anthropic import ChatAnthropic
from langchain_core.messages import SystemMessage
from langgraph.errors import GraphRecursionError
from langgraph.graph import END, StateGraph

from src.catalog import AgentSettings, build_settings
from src.config import ANTHROPIC_API_KEY
from src.errors import ModelServiceError, ModelTimeoutError, RoundLimitExceeded
from src.services.metrics import metrics
from src.session import (
    SessionState,
    final_answer,
    new_session,
    pending_tool_calls,
    tool_result_message,
)
from src.tools.registry import ToolCall, ToolRegistry

logger = logging.getLogger(__name__)


# ── LLM builder ─────────────────────────────────────────────────────


def _build_llm(settings: AgentSettings):
    """Build the Claude client bound to the full tool catalog."""
    llm = ChatAnthropic(
        model=settings.model_name,
        api_key=ANTHROPIC_API_KEY,
        temperature=0.1,
        max_tokens=1024,
        timeout=settings.round_timeout_seconds,
        max_retries=0,
    )
    return llm.bind_tools(settings.tool_specs(), tool_choice="auto")


def _is_timeout(exc: Exception) -> bool:
    return isinstance(exc, (TimeoutError, anthropic.APITimeoutError))


# ── Termination guard ───────────────────────────────────────────────


def enforce_limits(state: SessionState, calls: list[ToolCall], settings: AgentSettings) -> None:
    """Raise ``RoundLimitExceeded`` if dispatching *calls* would overrun a ceiling."""
    rounds = state.get("rounds", 0)
    made = state.get("tool_calls", 0)

    if rounds >= settings.max_rounds:
        raise RoundLimitExceeded(
            f"No final answer after {rounds} model rounds (limit {settings.max_rounds})",
            rounds=rounds,
            tool_calls=made,
        )
    if made + len(calls) > settings.max_tool_calls:
        raise RoundLimitExceeded(
            f"Model requested {made + len(calls)} tool calls (limit {settings.max_tool_calls})",
            rounds=rounds,
            tool_calls=made,
        )


# ── Node: model ─────────────────────────────────────────────────────


def _make_model_node(settings: AgentSettings):
    """Create the node that runs one model round.

    The bound client is captured in the closure so every round of every
    request reuses it.
    """
    llm_with_tools = _build_llm(settings)
    system = SystemMessage(content=settings.system_prompt)

    def model_node(state: SessionState) -> dict:
        round_no = state.get("rounds", 0) + 1
        logger.debug("model round %d — %s", round_no, settings.model_name)
        t0 = time.perf_counter()
        try:
            response = llm_with_tools.invoke([system] + state["messages"])
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                "anthropic", "llm_invoke",
                error_type=type(exc).__name__, latency_ms=elapsed,
            )
            if _is_timeout(exc):
                raise ModelTimeoutError(
                    f"Model round {round_no} timed out after {settings.round_timeout_seconds:g}s"
                ) from exc
            raise ModelServiceError(
                f"Model round {round_no} failed: {type(exc).__name__}"
            ) from exc

        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_success("anthropic", "llm_invoke", latency_ms=elapsed)
        logger.debug("model round %d responded in %.0fms", round_no, elapsed)
        return {"messages": [response], "rounds": round_no}

    return model_node


# ── Node: tools ─────────────────────────────────────────────────────


def _make_tools_node(settings: AgentSettings, registry: ToolRegistry):
    """Create the node that dispatches the latest round's tool calls."""

    def tools_node(state: SessionState) -> dict:
        calls = pending_tool_calls(state)
        enforce_limits(state, calls, settings)

        logger.info(
            "round %d: dispatching %s", state.get("rounds", 0), [c.name for c in calls],
        )
        outcomes = registry.dispatch_many(calls)
        return {
            "messages": [tool_result_message(o) for o in outcomes],
            "tool_calls": state.get("tool_calls", 0) + len(calls),
        }

    return tools_node


# ── Conditional edge ────────────────────────────────────────────────


def should_dispatch_tools(state: SessionState) -> str:
    """Route to the tools node while the model keeps requesting tools."""
    if pending_tool_calls(state):
        return "tools"
    return END


# ── Graph assembly ──────────────────────────────────────────────────


def create_booking_agent(
    settings: AgentSettings | None = None,
    registry: ToolRegistry | None = None,
):
    """Build and compile the TerminPilot orchestration graph.

    No checkpointer is attached: every invocation starts from the session it
    is given and nothing survives the call.
    """
    settings = settings or build_settings()
    registry = registry or ToolRegistry(settings)

    graph = StateGraph(SessionState)
    graph.add_node("model", _make_model_node(settings))
    graph.add_node("tools", _make_tools_node(settings, registry))

    graph.set_entry_point("model")
    graph.add_conditional_edges(
        "model", should_dispatch_tools, {"tools": "tools", END: END},
    )
    graph.add_edge("tools", "model")

    compiled = graph.compile()
    logger.debug(
        "TerminPilot agent compiled — model: %s, tools: %d, max rounds: %d, max tool calls: %d",
        settings.model_name, len(settings.tools), settings.max_rounds, settings.max_tool_calls,
    )
    return compiled


def run_chat(agent, user_message: str, settings: AgentSettings) -> str:
    """Run the loop for one user message and return the model's final answer.

    Raises ``RoundLimitExceeded`` or ``ModelServiceError`` for loop-level
    failures.
    """
    # model + tools steps per round, plus headroom so the explicit guard fires first
    recursion_limit = 2 * settings.max_rounds + 2
    try:
        state = agent.invoke(
            new_session(user_message),
            config={"recursion_limit": recursion_limit},
        )
    except RoundLimitExceeded as exc:
        metrics.record_chat("round_limit", exc.rounds, exc.tool_calls)
        logger.warning("Round limit hit: %s", exc)
        raise
    except GraphRecursionError as exc:
        # The graph discards its state here, so the tool-call count is unknown
        metrics.record_chat("round_limit", settings.max_rounds, None)
        raise RoundLimitExceeded(
            f"Graph recursion limit {recursion_limit} reached",
            rounds=settings.max_rounds,
            tool_calls=None,
        ) from exc
    except ModelServiceError:
        metrics.record_chat("model_error", None, None)
        raise
    except Exception:
        metrics.record_chat("error", None, None)
        raise

    metrics.record_chat("ok", state.get("rounds", 0), state.get("tool_calls", 0))
    return final_answer(state)
