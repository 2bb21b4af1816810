"""Shared test fixtures for the TerminPilot test suite."""

from __future__ import annotations

import os

import pytest


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-123")
    os.environ.setdefault("METRICS_ENABLED", "false")


@pytest.fixture
def settings():
    """Default settings with small, explicit loop limits."""
    from src.catalog import build_settings

    return build_settings(max_rounds=4, max_tool_calls=10, round_timeout_seconds=5.0)


@pytest.fixture
def registry(settings):
    from src.tools.registry import ToolRegistry

    return ToolRegistry(settings)


@pytest.fixture
def make_call():
    """Factory fixture for ToolCall objects."""
    from src.tools.registry import ToolCall

    counter = iter(range(1, 10_000))

    def _make(name: str, arguments=None, call_id: str | None = None):
        return ToolCall(id=call_id or f"call_{next(counter)}", name=name, arguments=arguments)

    return _make
