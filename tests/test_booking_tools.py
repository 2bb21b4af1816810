"""Tests for the simulated scheduling tools."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.tools.booking import (
    cancel_booking,
    create_booking,
    get_availability,
    new_booking_id,
    resolve_duration,
    send_message,
)
from src.tools.schemas import (
    CancelBookingArgs,
    CreateBookingArgs,
    GetAvailabilityArgs,
    SendMessageArgs,
)


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


class TestResolveDuration:
    def test_explicit_duration_wins(self, settings):
        args = GetAvailabilityArgs(service="Coloration", durationMinutes=15)
        assert resolve_duration(args, settings) == 15

    def test_catalog_lookup_by_service(self, settings):
        assert resolve_duration(GetAvailabilityArgs(service="Damenhaarschnitt"), settings) == 45
        assert resolve_duration(GetAvailabilityArgs(service="Coloration"), settings) == 120

    def test_unknown_service_defaults_to_60(self, settings):
        assert resolve_duration(GetAvailabilityArgs(service="Fassade streichen"), settings) == 60


class TestGetAvailability:
    @pytest.mark.parametrize(
        "service,duration,expected",
        [
            ("Herrenhaarschnitt", None, 30),
            ("Coloration", None, 120),
            ("Unbekannt", None, 60),
            ("Coloration", 90, 90),
        ],
    )
    def test_three_slots_two_hours_apart(self, settings, service, duration, expected):
        args = GetAvailabilityArgs(
            service=service,
            dateFrom="2026-03-02T09:00:00Z",
            durationMinutes=duration,
        )
        result = get_availability(args, settings)

        assert result.duration_minutes == expected
        assert len(result.slots) == 3
        for i, slot in enumerate(result.slots):
            assert slot.start == datetime(2026, 3, 2, 9, tzinfo=UTC) + timedelta(hours=2 * i)
            assert slot.end - slot.start == timedelta(minutes=expected)

    def test_missing_date_from_starts_now(self, settings):
        before = datetime.now(UTC)
        result = get_availability(GetAvailabilityArgs(service="Coloration"), settings)
        after = datetime.now(UTC)
        assert before <= result.slots[0].start <= after

    def test_naive_date_from_is_treated_as_utc(self, settings):
        args = GetAvailabilityArgs(service="Coloration", dateFrom="2026-03-02T09:00:00")
        result = get_availability(args, settings)
        assert result.slots[0].start.tzinfo is not None
        assert result.slots[0].start == datetime(2026, 3, 2, 9, tzinfo=UTC)

    def test_payload_uses_camel_case(self, settings):
        args = GetAvailabilityArgs(service="Coloration", dateFrom="2026-03-02T09:00:00Z")
        payload = get_availability(args, settings).to_payload()
        assert payload["durationMinutes"] == 120
        assert _parse(payload["slots"][1]["start"]) == datetime(2026, 3, 2, 11, tzinfo=UTC)
        assert _parse(payload["slots"][1]["end"]) == datetime(2026, 3, 2, 13, tzinfo=UTC)


class TestCreateBooking:
    def _args(self, **overrides):
        data = {
            "service": "Damenhaarschnitt",
            "start": "2026-03-02T10:00:00Z",
            "durationMinutes": 45,
            "customer": {"name": "Anna Schmidt", "email": "anna@example.de"},
            "notes": "Bitte nur Spitzen",
        }
        data.update(overrides)
        return CreateBookingArgs.model_validate(data)

    def test_end_is_start_plus_duration(self, settings):
        booking = create_booking(self._args(), settings)
        assert booking.end - booking.start == timedelta(minutes=45)

    def test_echoes_input_fields(self, settings):
        payload = create_booking(self._args(staffId="s-7"), settings).to_payload()
        assert payload["service"] == "Damenhaarschnitt"
        assert payload["durationMinutes"] == 45
        assert payload["customer"]["name"] == "Anna Schmidt"
        assert payload["customer"]["email"] == "anna@example.de"
        assert payload["notes"] == "Bitte nur Spitzen"
        assert payload["staffId"] == "s-7"
        assert payload["bookingId"].startswith("bk_")
        assert _parse(payload["end"]) == datetime(2026, 3, 2, 10, 45, tzinfo=UTC)

    def test_unknown_fields_are_echoed(self, settings):
        payload = create_booking(self._args(channelPreference="sms"), settings).to_payload()
        assert payload["channelPreference"] == "sms"

    def test_input_end_is_overwritten(self, settings):
        booking = create_booking(self._args(end="2026-03-02T11:00:00Z"), settings)
        payload = booking.to_payload()
        assert _parse(payload["end"]) == datetime(2026, 3, 2, 10, 45, tzinfo=UTC)

    def test_input_booking_id_is_replaced(self, settings):
        payload = create_booking(
            self._args(bookingId="bk_old", booking_id="bk_older"), settings,
        ).to_payload()
        assert payload["bookingId"] != "bk_old"
        assert payload["bookingId"].startswith("bk_")
        assert "booking_id" not in payload

    def test_unset_optional_fields_are_omitted(self, settings):
        payload = create_booking(self._args(), settings).to_payload()
        assert "locationId" not in payload
        assert "staffId" not in payload

    def test_booking_ids_are_unique(self, settings):
        ids = {new_booking_id() for _ in range(10_000)}
        assert len(ids) == 10_000
        assert all(i.startswith("bk_") and len(i) > 3 for i in ids)

    def test_each_booking_gets_a_new_id(self, settings):
        first = create_booking(self._args(), settings)
        second = create_booking(self._args(), settings)
        assert first.booking_id != second.booking_id


class TestCancelBooking:
    def test_cancel_with_reason(self, settings):
        payload = cancel_booking(
            CancelBookingArgs(bookingId="bk_123", reason="krank"), settings,
        ).to_payload()
        assert payload == {"bookingId": "bk_123", "status": "cancelled", "reason": "krank"}

    def test_cancel_without_reason_reports_null(self, settings):
        payload = cancel_booking(CancelBookingArgs(bookingId="bk_123"), settings).to_payload()
        assert payload == {"bookingId": "bk_123", "status": "cancelled", "reason": None}

    def test_empty_reason_becomes_null(self, settings):
        payload = cancel_booking(
            CancelBookingArgs(bookingId="bk_123", reason=""), settings,
        ).to_payload()
        assert payload["reason"] is None


class TestSendMessage:
    def test_always_delivered(self, settings):
        args = SendMessageArgs(channel="whatsapp", to="+49 170 1234567", body="Ihr Termin steht.")
        payload = send_message(args, settings).to_payload()
        assert payload["delivered"] is True
        assert payload["channel"] == "whatsapp"
