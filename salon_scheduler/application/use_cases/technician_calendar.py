from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from salon_scheduler.application.ports.account_repository import AccountRepositoryPort
from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.application.ports.schedule_repository import ScheduleRepositoryPort
from salon_scheduler.application.utils.validators import parse_date
from salon_scheduler.domain.entities.agreement import Agreement
from salon_scheduler.domain.entities.schedule import DayTimeRange, WeeklyRule


@dataclass(frozen=True)
class CalendarRule:
    rule: WeeklyRule
    ranges: list[DayTimeRange] = field(default_factory=list)  # only the requested weekday


@dataclass(frozen=True)
class CalendarDay:
    technician_id: int
    date: date
    rules: list[CalendarRule] = field(default_factory=list)
    appointments: list[Agreement] = field(default_factory=list)


class TechnicianCalendarUseCase:
    def __init__(
        self,
        schedules: ScheduleRepositoryPort,
        agreements: AgreementRepositoryPort,
        accounts: AccountRepositoryPort,
    ) -> None:
        self._schedules = schedules
        self._agreements = agreements
        self._accounts = accounts
        self._logger = logging.getLogger(__name__)

    async def get_day(self, technician_id: int, day: str) -> CalendarDay | None:
        """
        One day of a technician's calendar: the rules in effect with their
        ranges for that weekday, and the pending/confirmed appointments by
        start time. Returns None for an unknown technician.
        """
        target_date = parse_date(day)

        technician = await self._accounts.get_technician(technician_id)
        if technician is None:
            return None

        rules = [
            r for r in await self._schedules.get_rules_for_technician(technician_id)
            if r.is_active_on(target_date)
        ]
        rules.sort(key=lambda r: (r.effective_start, r.id or 0))

        appointments = await self._agreements.get_active_for_technician_on_date(target_date, technician_id)
        appointments.sort(key=lambda a: a.start_time)

        self._logger.info(
            "Calendar day loaded",
            extra={"technician_id": technician_id, "count": len(appointments)},
        )
        return CalendarDay(
            technician_id=technician_id,
            date=target_date,
            rules=[
                CalendarRule(rule=r, ranges=sorted(r.ranges_for(target_date), key=lambda d: d.begin_time))
                for r in rules
            ],
            appointments=appointments,
        )
