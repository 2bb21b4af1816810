"""Request-scoped conversation session.

The session is the LangGraph state that flows through the orchestration loop.
``messages`` uses the ``add_messages`` reducer, so nodes only ever append
turns:

* ``HumanMessage`` — the user's message (exactly one, seeded at start)
* ``AIMessage``    — a model reply, either text or pending ``tool_calls``
* ``ToolMessage``  — one tool result or tool error, tied to its call id

A fresh session is created for every ``/chat`` request and discarded
afterwards; nothing is checkpointed.
"""

from __future__ import annotations

from typing import Annotated

from langchain_core.messages import AIMessage, AnyMessage, BaseMessage, HumanMessage, ToolMessage
from langgraph.graph.message import add_messages
from typing_extensions import TypedDict

from src.extractor import extract_tool_calls
from src.tools.registry import DispatchOutcome, ToolCall


class SessionState(TypedDict):
    """State threaded through every round of the loop.

    ``rounds`` counts model calls made so far and ``tool_calls`` counts tool
    dispatches; both feed the termination guard.
    """

    messages: Annotated[list[AnyMessage], add_messages]
    rounds: int
    tool_calls: int


def new_session(user_message: str) -> SessionState:
    """Seed a session with the user's message."""
    return {
        "messages": [HumanMessage(content=user_message)],
        "rounds": 0,
        "tool_calls": 0,
    }


def last_model_message(state: SessionState) -> AIMessage | None:
    for message in reversed(state["messages"]):
        if isinstance(message, AIMessage):
            return message
    return None


def pending_tool_calls(state: SessionState) -> list[ToolCall]:
    """Tool calls requested by the latest turn, if that turn is a model turn."""
    if not state["messages"]:
        return []
    return extract_tool_calls(state["messages"][-1])


def tool_result_message(outcome: DispatchOutcome) -> ToolMessage:
    return ToolMessage(
        content=outcome.to_content(),
        tool_call_id=outcome.call_id,
        name=outcome.name,
        status="error" if outcome.is_error else "success",
    )


def message_text(message: BaseMessage) -> str:
    """Plain text of a message whose content may be a list of blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def final_answer(state: SessionState) -> str:
    """Text of the model's last turn (the loop only ends on a text answer)."""
    message = last_model_message(state)
    if message is None:
        return ""
    return message_text(message).strip()
