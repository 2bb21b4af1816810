"""TerminPilot — an AI booking assistant for hair salons and painters.

Architecture Overview
=====================

A client message is answered by a **tool-call orchestration loop** built as a
LangGraph state machine with two nodes:

1. **model** — Invokes Claude with the fixed persona prompt, the five tool
   schemas and the conversation so far. The model either answers or asks for
   tools.

2. **tools** — Dispatches every requested tool through the ``ToolRegistry``
   and appends one result (or structured error) per call.

Routing: model → (tool calls?) → tools → model (loop until no tool calls → END)

Key Design Decisions
--------------------
- **Bounded loop**: at most ``MAX_ROUNDS`` model calls and ``MAX_TOOL_CALLS``
  tool dispatches per message; overrunning either fails the request with
  ``RoundLimitExceeded``.
- **Tool errors are results**: malformed arguments, unknown tools and crashing
  handlers are returned to the model as errors so it can recover.
- **Simulated backends**: availability, bookings, cancellations and messages
  are in-process stubs behind the registry, ready to be swapped for real ones.
- **Immutable settings**: the prompt, tool catalog, service table and pricing
  rules are built once at startup (``AgentSettings``) and passed in.
- **Stateless requests**: each ``/chat`` call starts a fresh session.

Package Structure
-----------------
- ``src/agent.py`` — LangGraph StateGraph and ``run_chat``
- ``src/session.py`` — request-scoped conversation state
- ``src/extractor.py`` — tool calls from a model response
- ``src/catalog.py`` — tool catalog, service table, ``AgentSettings``
- ``src/config.py`` — configuration from environment variables
- ``src/errors.py`` — error taxonomy
- ``src/prompts.py`` — persona system prompt
- ``src/server.py`` — FastAPI application
- ``src/main.py`` — CLI chat interface
- ``src/services/`` — CloudWatch metrics
- ``src/tools/`` — tool registry, argument/result schemas and handlers
- ``src/api/`` — FastAPI routes and Pydantic schemas
"""
