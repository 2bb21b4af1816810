"""Static Tool Catalog and the immutable runtime configuration.

Everything in here is built once at process start (see ``build_settings``)
and is read-only afterwards.  The orchestration loop and the tool registry
receive an ``AgentSettings`` instance at construction time instead of reading
module-level globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from src import config
from src.prompts import render_system_prompt


# ── Tool definitions ─────────────────────────────────────────────────


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described capability exposed to the model."""

    name: str
    description: str
    parameter_schema: Mapping[str, Any]

    def to_tool_spec(self) -> dict[str, Any]:
        """Render in the function-calling format accepted by ``bind_tools``."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": dict(self.parameter_schema),
            },
        }


TOOL_CATALOG: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="getAvailability",
        description="Gibt freie Zeitfenster für eine Leistung zurück.",
        parameter_schema={
            "type": "object",
            "properties": {
                "service": {"type": "string"},
                "locationId": {"type": "string"},
                "staffId": {"type": "string"},
                "dateFrom": {"type": "string", "format": "date-time"},
                "dateTo": {"type": "string", "format": "date-time"},
                "durationMinutes": {"type": "integer"},
            },
            "required": ["service", "dateFrom", "dateTo"],
        },
    ),
    ToolDefinition(
        name="createBooking",
        description="Legt einen Termin an.",
        parameter_schema={
            "type": "object",
            "properties": {
                "service": {"type": "string"},
                "start": {"type": "string", "format": "date-time"},
                "durationMinutes": {"type": "integer"},
                "locationId": {"type": "string"},
                "staffId": {"type": "string"},
                "customer": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "email": {"type": "string"},
                        "phone": {"type": "string"},
                    },
                    "required": ["name"],
                },
                "notes": {"type": "string"},
            },
            "required": ["service", "start", "durationMinutes", "customer"],
        },
    ),
    ToolDefinition(
        name="cancelBooking",
        description="Storniert einen Termin.",
        parameter_schema={
            "type": "object",
            "properties": {
                "bookingId": {"type": "string"},
                "reason": {"type": "string"},
            },
            "required": ["bookingId"],
        },
    ),
    ToolDefinition(
        name="getPriceEstimate",
        description="Gibt eine unverbindliche Maler-Richtpreisschätzung.",
        parameter_schema={
            "type": "object",
            "properties": {
                "squareMeters": {"type": "number"},
                "rooms": {"type": "integer"},
                "ceilingHeight": {"type": "number"},
                "surface": {"type": "string"},
                "paintQuality": {"type": "string", "enum": ["basic", "premium"]},
                "locationPostalCode": {"type": "string"},
            },
            "required": ["squareMeters", "paintQuality"],
        },
    ),
    ToolDefinition(
        name="sendMessage",
        description="Bestätigung per E-Mail/SMS/WhatsApp verschicken.",
        parameter_schema={
            "type": "object",
            "properties": {
                "channel": {"type": "string", "enum": ["email", "sms", "whatsapp"]},
                "to": {"type": "string"},
                "subject": {"type": "string"},
                "body": {"type": "string"},
            },
            "required": ["channel", "to", "body"],
        },
    ),
)

# Canonical service durations in minutes
SERVICE_DURATIONS: Mapping[str, int] = MappingProxyType({
    "Damenhaarschnitt": 45,
    "Herrenhaarschnitt": 30,
    "Coloration": 120,
    "Besichtigung Maler": 60,
})


# ── Pricing rules ────────────────────────────────────────────────────


@dataclass(frozen=True)
class PricingRules:
    """Parameters of the painter price estimate."""

    basic_rate: float = 7.5
    premium_rate: float = 10.5
    reference_ceiling_height: float = 2.5
    extra_room_factor: float = 0.05
    travel_surcharge: float = 25.0
    vat_rate: float = 0.19
    disclaimer: str = (
        "Unverbindliche Richtpreis-Schätzung. Vor-Ort-Besichtigung empfohlen."
    )


# ── Runtime settings ─────────────────────────────────────────────────


@dataclass(frozen=True)
class AgentSettings:
    """Immutable configuration shared by the loop and the tool registry."""

    system_prompt: str
    tools: tuple[ToolDefinition, ...] = TOOL_CATALOG
    service_durations: Mapping[str, int] = field(default_factory=lambda: SERVICE_DURATIONS)
    default_duration_minutes: int = 60
    slot_count: int = 3
    slot_spacing_hours: int = 2
    pricing: PricingRules = field(default_factory=PricingRules)
    model_name: str = config.MODEL_NAME
    max_rounds: int = config.MAX_ROUNDS
    max_tool_calls: int = config.MAX_TOOL_CALLS
    round_timeout_seconds: float = config.ROUND_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        if self.max_tool_calls < 1:
            raise ValueError("max_tool_calls must be at least 1")
        names = [t.name for t in self.tools]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate tool names in catalog: {names}")

    @property
    def tool_names(self) -> list[str]:
        return [t.name for t in self.tools]

    def tool_specs(self) -> list[dict[str, Any]]:
        return [t.to_tool_spec() for t in self.tools]


def build_settings(**overrides: Any) -> AgentSettings:
    """Build the process-wide ``AgentSettings`` from ``src.config``.

    Keyword arguments override individual fields (used by tests and the CLI).
    """
    tools = overrides.pop("tools", TOOL_CATALOG)
    system_prompt = overrides.pop(
        "system_prompt", render_system_prompt([t.name for t in tools]),
    )
    return AgentSettings(system_prompt=system_prompt, tools=tools, **overrides)
