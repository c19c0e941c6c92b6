from __future__ import annotations

from datetime import date, time

from salon_scheduler.core.config import settings
from salon_scheduler.domain.entities.account import Technician
from salon_scheduler.domain.entities.salon import Salon
from salon_scheduler.domain.entities.schedule import DayTimeRange, WeeklyRule
from salon_scheduler.domain.entities.service import Service

SALONS: list[Salon] = [
    Salon(id=settings.SALON_ID, name=settings.SALON_NAME, timezone=settings.SALON_TIMEZONE),
]

SERVICES: list[Service] = [
    Service(id=1, name="Gel Manicure", duration_minutes=45),
    Service(id=2, name="Classic Pedicure", duration_minutes=60),
    Service(id=3, name="Nail Art Add-on", duration_minutes=15),
    Service(id=4, name="Acrylic Full Set", duration_minutes=90),
]

TECHNICIANS: list[Technician] = [
    Technician(id=1, name="Mila", email="mila@example.com", service_ids=(1, 2, 3)),
    Technician(id=2, name="Sanne", email="sanne@example.com", notify_by_email=False, service_ids=(1, 3, 4)),
]


def _weekdays(begin: time, end: time, days: range) -> list[DayTimeRange]:
    return [DayTimeRange(day_of_week=d, begin_time=begin, end_time=end) for d in days]


WEEKLY_RULES: list[WeeklyRule] = [
    WeeklyRule(
        id=1,
        technician_id=1,
        salon_id=settings.SALON_ID,
        effective_start=date(2025, 1, 1),
        day_ranges=_weekdays(time(9, 0), time(12, 0), range(0, 5)) + _weekdays(time(13, 0), time(17, 0), range(0, 5)),
        release_window_days=14,
    ),
    WeeklyRule(
        id=2,
        technician_id=2,
        salon_id=settings.SALON_ID,
        effective_start=date(2025, 1, 1),
        day_ranges=_weekdays(time(10, 0), time(18, 0), range(1, 6)),
        release_window_days=14,
    ),
]
