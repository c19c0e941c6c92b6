"""
Tests for the client booking flow.
"""

from __future__ import annotations

from datetime import time, timedelta

import pytest

from conftest import MONDAY, make_agreement
from salon_scheduler.application.dto.requests import BookingRequest
from salon_scheduler.application.exceptions import ValidationError
from salon_scheduler.application.use_cases.booking import BookingStatus, BookingUseCase
from salon_scheduler.domain.entities.agreement import AppointmentStatus, hash_token
from salon_scheduler.infrastructure.email.mock_email import MockEmailSender


def _request(**overrides) -> BookingRequest:
    values = dict(
        agreement_date=MONDAY.isoformat(),
        start_time="10:00",
        service_id=1,
        technician_id=1,
        salon_id=1,
        client_email="anna@example.com",
        client_name="Anna",
    )
    values.update(overrides)
    return BookingRequest(**values)


@pytest.fixture
def booking(agreements, catalog, accounts, email_sender, clock) -> BookingUseCase:
    return BookingUseCase(agreements, catalog, accounts, email_sender, hold_minutes=30, now_fn=clock)


@pytest.mark.asyncio
async def test_booking_creates_pending_agreement_and_sends_link(booking, agreements, email_sender, clock):
    result = await booking.book(_request())

    assert result.status == BookingStatus.pending
    assert result.confirmation_sent is True
    stored = await agreements.get_by_id(result.agreement_id)
    assert stored.status == AppointmentStatus.pending
    assert stored.start_time == time(10, 0)
    assert stored.expire_at == clock() + timedelta(minutes=30)

    links = email_sender.of_kind("confirmation_link")
    assert len(links) == 1
    assert links[0].to == "anna@example.com"
    assert hash_token(links[0].payload["token"]) == stored.confirm_token_hash


@pytest.mark.asyncio
async def test_booking_notifies_opted_in_technician(booking, email_sender):
    await booking.book(_request())

    notices = email_sender.of_kind("tech_notification")
    assert len(notices) == 1
    assert notices[0].to == "mila@example.com"


@pytest.mark.asyncio
async def test_booking_skips_technician_who_opted_out(booking, email_sender):
    await booking.book(_request(technician_id=2))

    assert email_sender.of_kind("tech_notification") == []


@pytest.mark.asyncio
async def test_booking_reuses_or_creates_client(booking, agreements, accounts):
    existing = await booking.book(_request(client_email="ANNA@example.com", start_time="09:00"))
    created = await booking.book(_request(client_email="new@example.com", client_name="Noor"))

    assert (await agreements.get_by_id(existing.agreement_id)).client_id == 1
    new_client = await accounts.get_client_by_email("new@example.com")
    assert new_client is not None
    assert (await agreements.get_by_id(created.agreement_id)).client_id == new_client.id


@pytest.mark.asyncio
async def test_booking_rejects_taken_slot(booking, agreements, email_sender):
    await agreements.save(make_agreement(time(10, 0)))

    result = await booking.book(_request(start_time="10:15"))

    assert result.status == BookingStatus.slot_taken
    assert len(result.conflicts) == 1
    assert result.agreement_id is None
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_booking_allows_slot_freed_by_cancellation(booking, agreements):
    await agreements.save(make_agreement(time(10, 0), status=AppointmentStatus.cancelled))

    result = await booking.book(_request())

    assert result.status == BookingStatus.pending


@pytest.mark.asyncio
async def test_unknown_service_or_technician_is_not_found(booking):
    assert (await booking.book(_request(service_id=99))).status == BookingStatus.not_found
    assert (await booking.book(_request(technician_id=99))).status == BookingStatus.not_found
    assert (await booking.book(_request(salon_id=99))).status == BookingStatus.not_found


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"agreement_date": "04-03-2030"},
        {"start_time": "10am"},
        {"client_email": "anna.example.com"},
        {"client_name": "   "},
    ],
)
async def test_invalid_input_is_rejected_before_saving(booking, agreements, overrides):
    with pytest.raises(ValidationError):
        await booking.book(_request(**overrides))

    assert await agreements.get_active_for_technician_on_date(MONDAY, 1) == []


class BrokenEmailSender(MockEmailSender):
    async def send_confirmation_link(self, to, token, appointment_time):
        raise RuntimeError("smtp down")


@pytest.mark.asyncio
async def test_email_failure_keeps_the_booking(agreements, catalog, accounts, clock):
    uc = BookingUseCase(agreements, catalog, accounts, BrokenEmailSender(), now_fn=clock)

    result = await uc.book(_request())

    assert result.status == BookingStatus.pending
    assert result.confirmation_sent is False
    assert result.error
    assert (await agreements.get_by_id(result.agreement_id)).status == AppointmentStatus.pending
