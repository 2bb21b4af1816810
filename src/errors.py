"""Error taxonomy for the TerminPilot agent.

Two families:

* **Tool-level** (``ToolDispatchError`` and subclasses) — raised inside the
  tool registry and always converted into a structured ``ToolError`` that is
  handed back to the model.  They never reach the HTTP boundary.
* **Loop-level** (``RoundLimitExceeded``, ``ModelServiceError``) — fatal to
  the request and surfaced to the caller as ``{ok: false, error}``.
"""

from __future__ import annotations


class TerminPilotError(Exception):
    """Base class for all errors raised by the agent."""


# ── Tool-level ───────────────────────────────────────────────────────


class ToolDispatchError(TerminPilotError):
    """A single tool call could not be executed."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(message)


class ArgumentParseError(ToolDispatchError):
    """Tool arguments were malformed or failed schema validation."""


class UnknownToolError(ToolDispatchError):
    """The model requested a tool that is not in the catalog."""

    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Unknown tool {tool_name}")


class DispatchInternalError(ToolDispatchError):
    """A tool handler raised unexpectedly."""


# ── Loop-level ───────────────────────────────────────────────────────


class RoundLimitExceeded(TerminPilotError):
    """The model kept requesting tools beyond the configured ceiling."""

    def __init__(self, message: str, *, rounds: int, tool_calls: int | None):
        self.rounds = rounds
        self.tool_calls = tool_calls
        super().__init__(message)


class ModelServiceError(TerminPilotError):
    """The language-model service call failed (network, auth, rate limit)."""


class ModelTimeoutError(ModelServiceError):
    """A single model round exceeded its timeout."""
