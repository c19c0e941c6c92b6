"""
Tests for technician-side appointment create, update and cancel.
"""

from __future__ import annotations

import asyncio
from datetime import time

import pytest

from conftest import MONDAY, SANNE, make_agreement
from salon_scheduler.application.dto.requests import AppointmentInput
from salon_scheduler.application.ports.email_sender import NotificationKind
from salon_scheduler.application.use_cases.manage_appointments import ChangeStatus, ManageAppointmentsUseCase
from salon_scheduler.application.use_cases.resolve_confirmation import (
    ConfirmationOutcome,
    ResolveConfirmationUseCase,
)
from salon_scheduler.domain.entities.agreement import AppointmentStatus
from salon_scheduler.infrastructure.store.memory_store import MemoryAgreementRepository


def _input(**overrides) -> AppointmentInput:
    values = dict(
        date=MONDAY.isoformat(),
        time="10:00",
        service_id=1,
        client_name="Anna",
        client_email="anna@example.com",
    )
    values.update(overrides)
    return AppointmentInput(**values)


@pytest.fixture
def manage(agreements, catalog, accounts, email_sender, clock) -> ManageAppointmentsUseCase:
    return ManageAppointmentsUseCase(agreements, catalog, accounts, email_sender, salon_id=1, now_fn=clock)


@pytest.mark.asyncio
async def test_created_appointment_is_confirmed(manage, agreements, email_sender, clock):
    result = await manage.create_appointment(1, _input())

    assert result.status == ChangeStatus.applied
    stored = await agreements.get_by_id(result.agreement_id)
    assert stored.status == AppointmentStatus.confirmed
    assert stored.confirmed_at == clock()
    assert stored.confirm_token_hash is None

    notices = email_sender.of_kind("client_notification")
    assert len(notices) == 1
    assert notices[0].payload["notice"].kind == NotificationKind.booked


@pytest.mark.asyncio
async def test_create_reports_conflicts_unless_forced(manage, agreements):
    await agreements.save(make_agreement(time(10, 0)))

    blocked = await manage.create_appointment(1, _input(time="10:15"))
    assert blocked.status == ChangeStatus.conflicts
    assert blocked.agreement_id is None
    assert [c.start_time for c in blocked.conflicts] == [time(10, 0)]
    assert len(await agreements.get_active_for_technician_on_date(MONDAY, 1)) == 1

    forced = await manage.create_appointment(1, _input(time="10:15"), force=True)
    assert forced.status == ChangeStatus.applied
    assert len(await agreements.get_active_for_technician_on_date(MONDAY, 1)) == 2


@pytest.mark.asyncio
async def test_update_does_not_conflict_with_itself(manage, agreements, email_sender):
    agreement_id = await agreements.save(make_agreement(time(10, 0)))

    result = await manage.update_appointment(agreement_id, 1, _input(time="10:10"))

    assert result.status == ChangeStatus.applied
    assert (await agreements.get_by_id(agreement_id)).start_time == time(10, 10)

    tech = email_sender.of_kind("tech_notification")[0].payload["notice"]
    assert tech.kind == NotificationKind.modified
    assert tech.old_time == time(10, 0)
    assert tech.time == time(10, 10)
    assert len(email_sender.of_kind("client_notification")) == 1


@pytest.mark.asyncio
async def test_update_onto_another_appointment(manage, agreements):
    moving = await agreements.save(make_agreement(time(9, 0)))
    await agreements.save(make_agreement(time(11, 0)))

    blocked = await manage.update_appointment(moving, 1, _input(time="10:45"))
    assert blocked.status == ChangeStatus.conflicts
    assert (await agreements.get_by_id(moving)).start_time == time(9, 0)

    forced = await manage.update_appointment(moving, 1, _input(time="10:45"), force=True)
    assert forced.status == ChangeStatus.applied
    assert (await agreements.get_by_id(moving)).start_time == time(10, 45)


@pytest.mark.asyncio
async def test_update_changes_service(manage, agreements):
    agreement_id = await agreements.save(make_agreement(time(10, 0)))

    await manage.update_appointment(agreement_id, 1, _input(service_id=2))

    stored = await agreements.get_by_id(agreement_id)
    assert stored.service.id == 2
    assert stored.end_time == time(11, 0)


@pytest.mark.asyncio
async def test_update_other_technicians_appointment_is_not_found(manage, agreements):
    agreement_id = await agreements.save(make_agreement(time(10, 0)))

    result = await manage.update_appointment(agreement_id, 2, _input())

    assert result.status == ChangeStatus.not_found


@pytest.mark.asyncio
async def test_cancel_appointment(manage, agreements, email_sender):
    agreement_id = await agreements.save(make_agreement(time(10, 0)))

    result = await manage.cancel_appointment(agreement_id, 1)

    assert result.status == ChangeStatus.applied
    assert (await agreements.get_by_id(agreement_id)).status == AppointmentStatus.cancelled
    assert email_sender.of_kind("tech_notification")[0].payload["notice"].kind == NotificationKind.cancelled
    assert email_sender.of_kind("client_notification")[0].payload["notice"].kind == NotificationKind.cancelled
    assert (await manage.cancel_appointment(agreement_id, 2)).status == ChangeStatus.not_found

    again = await manage.cancel_appointment(agreement_id, 1)
    assert again.status == ChangeStatus.applied
    assert len(email_sender.of_kind("client_notification")) == 1


@pytest.mark.asyncio
async def test_cancel_skips_technician_who_opted_out(manage, agreements, email_sender):
    agreement_id = await agreements.save(make_agreement(time(10, 0), technician=SANNE))

    await manage.cancel_appointment(agreement_id, SANNE.id)

    assert email_sender.of_kind("tech_notification") == []
    assert len(email_sender.of_kind("client_notification")) == 1


@pytest.mark.asyncio
async def test_cancelled_appointment_cannot_be_edited(manage, agreements, email_sender):
    agreement_id = await agreements.save(make_agreement(time(10, 0), status=AppointmentStatus.cancelled))

    result = await manage.update_appointment(agreement_id, 1, _input(time="11:00"))

    assert result.status == ChangeStatus.not_editable
    assert "cancelled" in result.error
    assert (await agreements.get_by_id(agreement_id)).start_time == time(10, 0)
    assert email_sender.sent == []


class YieldingReadAgreementRepository(MemoryAgreementRepository):
    """Hands control back to the loop after each read by id so a confirmation can land in between."""

    async def get_by_id(self, agreement_id):
        row = await super().get_by_id(agreement_id)
        await asyncio.sleep(0)
        return row


async def _pending(agreements, clock) -> tuple[int, str]:
    agreement = make_agreement(time(10, 0), status=AppointmentStatus.pending)
    token = agreement.mark_pending(clock(), hold_minutes=30)
    return await agreements.save(agreement), token


@pytest.mark.asyncio
async def test_edit_racing_a_confirmation_keeps_it_confirmed(catalog, accounts, email_sender, clock):
    agreements = YieldingReadAgreementRepository()
    agreement_id, token = await _pending(agreements, clock)
    manage = ManageAppointmentsUseCase(agreements, catalog, accounts, email_sender, salon_id=1, now_fn=clock)
    resolver = ResolveConfirmationUseCase(agreements, email_sender, hold_minutes=30, now_fn=clock)

    edit, outcome = await asyncio.gather(
        manage.update_appointment(agreement_id, 1, _input(time="10:10")),
        resolver.resolve_token(token),
    )

    assert edit.status == ChangeStatus.applied
    assert outcome == ConfirmationOutcome.confirmed
    stored = await agreements.get_by_id(agreement_id)
    assert stored.status == AppointmentStatus.confirmed
    assert stored.start_time == time(10, 10)
    assert stored.expire_at is None
    assert len(email_sender.of_kind("final_confirmation")) == 1

    assert await resolver.resolve_token(token) == ConfirmationOutcome.already_confirmed
    assert len(email_sender.of_kind("final_confirmation")) == 2


@pytest.mark.asyncio
async def test_cancel_racing_a_confirmation_stays_cancelled(catalog, accounts, email_sender, clock):
    agreements = YieldingReadAgreementRepository()
    agreement_id, token = await _pending(agreements, clock)
    manage = ManageAppointmentsUseCase(agreements, catalog, accounts, email_sender, salon_id=1, now_fn=clock)
    resolver = ResolveConfirmationUseCase(agreements, email_sender, hold_minutes=30, now_fn=clock)

    cancel, outcome = await asyncio.gather(
        manage.cancel_appointment(agreement_id, 1),
        resolver.resolve_token(token),
    )

    assert cancel.status == ChangeStatus.applied
    assert outcome == ConfirmationOutcome.confirmed
    assert (await agreements.get_by_id(agreement_id)).status == AppointmentStatus.cancelled
    assert len(email_sender.of_kind("client_notification")) == 1
    assert await resolver.resolve_token(token) == ConfirmationOutcome.cancelled
