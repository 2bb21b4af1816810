"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_MESSAGE = "Hallo!"


class ChatRequest(BaseModel):
    """Incoming chat message."""

    model_config = ConfigDict(populate_by_name=True)

    user_message: str = Field(
        default=DEFAULT_USER_MESSAGE,
        alias="userMessage",
        max_length=4000,
        description="The client's message; defaults to a greeting when missing or blank",
    )

    @field_validator("user_message", mode="before")
    @classmethod
    def _default_when_blank(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_USER_MESSAGE
        return value


class ChatResponse(BaseModel):
    """Successful agent reply."""

    ok: Literal[True] = True
    reply: str = Field(..., description="The agent's final answer")


class ErrorResponse(BaseModel):
    """Failed chat request."""

    ok: Literal[False] = False
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "terminpilot-agent"
