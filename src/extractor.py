"""Pull the pending tool invocations out of a model response.

LangChain splits a model's tool requests into ``tool_calls`` (arguments parsed
into a dict) and ``invalid_tool_calls`` (argument text the client could not
parse).  Both are returned so that malformed arguments reach the registry and
come back to the model as an error, instead of being silently dropped.
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage

from src.tools.registry import ToolCall

logger = logging.getLogger(__name__)


def _declared_order(message: AIMessage) -> dict[str, int]:
    """Position of each ``tool_use`` block in the raw content, keyed by id."""
    if not isinstance(message.content, list):
        return {}
    order: dict[str, int] = {}
    for index, block in enumerate(message.content):
        if isinstance(block, dict) and block.get("type") in ("tool_use", "tool_call"):
            block_id = block.get("id")
            if block_id:
                order[block_id] = index
    return order


def _to_tool_call(raw: dict[str, Any], index: int) -> ToolCall:
    # Stable across repeated extraction from the same message
    call_id = raw.get("id") or f"call_{index}"
    return ToolCall(id=call_id, name=raw.get("name") or "", arguments=raw.get("args"))


def extract_tool_calls(message: BaseMessage | None) -> list[ToolCall]:
    """Return the tool calls declared by *message*, in the model's order.

    Returns an empty list when the message is a final answer.
    """
    if not isinstance(message, AIMessage):
        return []

    raw_valid = list(message.tool_calls or [])
    raw_invalid = list(message.invalid_tool_calls or [])
    valid = [_to_tool_call(tc, i) for i, tc in enumerate(raw_valid)]
    invalid = [_to_tool_call(tc, len(raw_valid) + i) for i, tc in enumerate(raw_invalid)]
    if invalid:
        logger.warning(
            "Model sent %d tool call(s) with unparseable arguments: %s",
            len(invalid), [c.name for c in invalid],
        )

    calls = valid + invalid
    order = _declared_order(message)
    if order:
        # Calls missing from the content blocks keep their relative order at the end
        fallback = len(order)
        calls.sort(key=lambda c: order.get(c.id, fallback))
    return calls
