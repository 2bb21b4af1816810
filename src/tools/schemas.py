"""Pydantic models for tool arguments and tool results.

Argument models mirror the parameter schemas in ``src.catalog`` and accept the
camelCase keys the model sends.  Result models are serialised back to camelCase
JSON for the model.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, ClassVar, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# Naive timestamps from the model are taken as UTC
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class ToolModel(BaseModel):
    """Base for everything exchanged with the model as tool I/O."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Optional fields left unset are dropped from the payload unless set here
    keep_nulls: ClassVar[bool] = False

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=not self.keep_nulls)


# ── Arguments ────────────────────────────────────────────────────────


class GetAvailabilityArgs(ToolModel):
    service: str
    location_id: str | None = None
    staff_id: str | None = None
    # Declared required in the catalog; the handler falls back to "now".
    date_from: UtcDatetime | None = None
    date_to: UtcDatetime | None = None
    duration_minutes: int | None = Field(default=None, gt=0)


class Customer(ToolModel):
    model_config = ConfigDict(extra="allow")

    name: str
    email: str | None = None
    phone: str | None = None


class CreateBookingArgs(ToolModel):
    # Unknown fields are echoed back in the booking
    model_config = ConfigDict(extra="allow")

    service: str
    start: UtcDatetime
    duration_minutes: int = Field(gt=0)
    customer: Customer
    location_id: str | None = None
    staff_id: str | None = None
    notes: str | None = None


class CancelBookingArgs(ToolModel):
    booking_id: str = Field(min_length=1)
    reason: str | None = None


class PriceEstimateArgs(ToolModel):
    square_meters: float
    paint_quality: Literal["basic", "premium"]
    rooms: int | None = None
    ceiling_height: float | None = None
    surface: str | None = None
    location_postal_code: str | None = None


class SendMessageArgs(ToolModel):
    channel: Literal["email", "sms", "whatsapp"]
    to: str = Field(min_length=1)
    subject: str | None = None
    body: str


# ── Results ──────────────────────────────────────────────────────────


class AvailabilitySlot(ToolModel):
    start: datetime
    end: datetime


class AvailabilityResult(ToolModel):
    slots: list[AvailabilitySlot]
    duration_minutes: int


class Booking(CreateBookingArgs):
    """A created booking: the request fields plus id and computed end."""

    booking_id: str
    end: datetime


class Cancellation(ToolModel):
    keep_nulls = True

    booking_id: str
    status: Literal["cancelled"] = "cancelled"
    reason: str | None = None


class PriceEstimate(ToolModel):
    net: float
    vat: float
    gross: float


class PriceEstimateResult(ToolModel):
    estimate: PriceEstimate
    disclaimer: str


class DeliveryReceipt(ToolModel):
    delivered: bool = True
    channel: str
    to: str
