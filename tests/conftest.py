"""
Shared fixtures: seeded in-memory stores, a recording email sender and a
controllable clock.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time

import pytest

from salon_scheduler.domain.entities.account import Client, Technician
from salon_scheduler.domain.entities.agreement import Agreement, AppointmentStatus
from salon_scheduler.domain.entities.salon import Salon
from salon_scheduler.domain.entities.schedule import DayTimeRange, WeeklyRule
from salon_scheduler.domain.entities.service import Service
from salon_scheduler.infrastructure.email.mock_email import MockEmailSender
from salon_scheduler.infrastructure.store.memory_store import (
    MemoryAccountRepository,
    MemoryAgreementRepository,
    MemoryCatalog,
    MemoryScheduleRepository,
)

MONDAY = date(2030, 3, 4)
MANICURE = Service(id=1, name="Gel Manicure", duration_minutes=30)
PEDICURE = Service(id=2, name="Classic Pedicure", duration_minutes=60)
MILA = Technician(id=1, name="Mila", email="mila@example.com", service_ids=(1, 2))
SANNE = Technician(id=2, name="Sanne", email="sanne@example.com", notify_by_email=False, service_ids=(1,))
ANNA = Client(id=1, name="Anna", email="anna@example.com")
SALON = Salon(id=1, name="Test Salon", timezone="UTC")


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def monday_rule(technician_id: int = 1, begin: time = time(9, 0), end: time = time(12, 0), **kwargs) -> WeeklyRule:
    return WeeklyRule(
        id=kwargs.pop("id", None),
        technician_id=technician_id,
        salon_id=SALON.id,
        effective_start=kwargs.pop("effective_start", date(2030, 1, 1)),
        day_ranges=[DayTimeRange(day_of_week=0, begin_time=begin, end_time=end)],
        **kwargs,
    )


def make_agreement(
    start: time,
    service: Service = MANICURE,
    on: date = MONDAY,
    status: AppointmentStatus = AppointmentStatus.confirmed,
    technician: Technician = MILA,
    client: Client = ANNA,
    agreement_id: int | None = None,
) -> Agreement:
    return Agreement(
        date=on,
        start_time=start,
        service=service,
        technician=technician,
        client=client,
        salon_id=SALON.id,
        id=agreement_id,
        status=status,
    )


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2030, 3, 1, 8, 0, tzinfo=UTC))


@pytest.fixture
def email_sender() -> MockEmailSender:
    return MockEmailSender()


@pytest.fixture
def agreements() -> MemoryAgreementRepository:
    return MemoryAgreementRepository()


@pytest.fixture
def schedules() -> MemoryScheduleRepository:
    return MemoryScheduleRepository([monday_rule(id=1), monday_rule(technician_id=2, id=2)])


@pytest.fixture
def catalog() -> MemoryCatalog:
    return MemoryCatalog(services=[MANICURE, PEDICURE], salons=[SALON])


@pytest.fixture
def accounts() -> MemoryAccountRepository:
    return MemoryAccountRepository(technicians=[MILA, SANNE], clients=[ANNA])
