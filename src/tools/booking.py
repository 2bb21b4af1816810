"""Simulated scheduling tools: availability, bookings, cancellations, messages.

Nothing here persists or leaves the process.  The handlers stand in for a
real calendar and messaging backend and are meant to be swapped out behind
the tool registry.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

from src.catalog import AgentSettings
from src.tools.schemas import (
    AvailabilityResult,
    AvailabilitySlot,
    Booking,
    CancelBookingArgs,
    Cancellation,
    CreateBookingArgs,
    DeliveryReceipt,
    GetAvailabilityArgs,
    SendMessageArgs,
)

logger = logging.getLogger(__name__)

_GENERATED_FIELDS = frozenset({"booking_id", "bookingId", "end"})


def new_booking_id() -> str:
    """Return a collision-resistant booking identifier."""
    return f"bk_{uuid.uuid4().hex}"


def resolve_duration(args: GetAvailabilityArgs, settings: AgentSettings) -> int:
    """Explicit duration, else the service's canonical one, else the default."""
    if args.duration_minutes is not None:
        return args.duration_minutes
    return settings.service_durations.get(args.service, settings.default_duration_minutes)


# ── Tool 1: availability ────────────────────────────────────────────


def get_availability(args: GetAvailabilityArgs, settings: AgentSettings) -> AvailabilityResult:
    """Return ``slot_count`` candidate slots spaced ``slot_spacing_hours`` apart."""
    duration = resolve_duration(args, settings)
    start = args.date_from or datetime.now(UTC)
    length = timedelta(minutes=duration)
    spacing = timedelta(hours=settings.slot_spacing_hours)

    slots = []
    for i in range(settings.slot_count):
        slot_start = start + i * spacing
        slots.append(AvailabilitySlot(start=slot_start, end=slot_start + length))

    return AvailabilityResult(slots=slots, duration_minutes=duration)


# ── Tool 2: create booking ──────────────────────────────────────────


def create_booking(args: CreateBookingArgs, settings: AgentSettings) -> Booking:
    # The id and end time are always generated here, never taken from the input
    fields = {k: v for k, v in args.model_dump().items() if k not in _GENERATED_FIELDS}
    booking = Booking(
        **fields,
        booking_id=new_booking_id(),
        end=args.start + timedelta(minutes=args.duration_minutes),
    )
    logger.info("Simulated booking %s for %s at %s", booking.booking_id, args.service, args.start)
    return booking


# ── Tool 3: cancel booking ──────────────────────────────────────────


def cancel_booking(args: CancelBookingArgs, settings: AgentSettings) -> Cancellation:
    logger.info("Simulated cancellation of %s", args.booking_id)
    return Cancellation(booking_id=args.booking_id, reason=args.reason or None)


# ── Tool 4: send confirmation ───────────────────────────────────────


def send_message(args: SendMessageArgs, settings: AgentSettings) -> DeliveryReceipt:
    logger.info("Simulated %s message to %s", args.channel, args.to)
    return DeliveryReceipt(channel=args.channel, to=args.to)
