from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from salon_scheduler.application.exceptions import ValidationError
from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.application.ports.catalog import CatalogPort
from salon_scheduler.application.ports.schedule_repository import ScheduleRepositoryPort
from salon_scheduler.application.scheduling.availability import (
    DEFAULT_GRANULARITY_MINUTES,
    TechnicianSlots,
    get_available_start_times,
    normalize,
)
from salon_scheduler.application.utils.validators import parse_date
from salon_scheduler.domain.entities.schedule import WeeklyRule
from salon_scheduler.domain.entities.service import Service

NowFn = Callable[[], datetime]


@dataclass(frozen=True)
class AvailabilityResult:
    salon_id: int
    service: Service
    slots: list[TechnicianSlots] = field(default_factory=list)


class PullAvailabilityUseCase:
    def __init__(
        self,
        schedules: ScheduleRepositoryPort,
        agreements: AgreementRepositoryPort,
        catalog: CatalogPort,
        timezone: ZoneInfo,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        max_days: int = 31,
        now_fn: NowFn | None = None,
    ) -> None:
        self._schedules = schedules
        self._agreements = agreements
        self._catalog = catalog
        self._timezone = timezone
        self._granularity = granularity_minutes
        self._max_days = max_days
        self._now_fn = now_fn or (lambda: datetime.now(UTC))
        self._logger = logging.getLogger(__name__)

    def _local_now(self) -> datetime:
        now = self._now_fn()
        if now.tzinfo is None:
            return now
        return now.astimezone(self._timezone)

    async def execute(
        self,
        salon_id: int,
        service_id: int,
        date_begin: str,
        date_end: str,
    ) -> AvailabilityResult | None:
        """
        Bookable start times for a service at a salon over a date range.

        Returns None when the salon, its schedules or the service cannot be
        found. Raises ValidationError for malformed or inverted dates.
        """
        start_date = parse_date(date_begin, "dateBegin")
        end_date = parse_date(date_end, "dateEnd")
        if end_date < start_date:
            raise ValidationError("End date must be after start date")
        if (end_date - start_date).days + 1 > self._max_days:
            raise ValidationError(f"Date range cannot exceed {self._max_days} days")

        salon = await self._catalog.get_salon(salon_id)
        if salon is None:
            return None

        rules = await self._schedules.get_rules_for_salon(salon_id)
        if not rules:
            self._logger.info("Salon has no schedules", extra={"salon_id": salon_id})
            return None

        service = await self._catalog.get_service(service_id)
        if service is None:
            return None

        rules_by_technician: dict[int, list[WeeklyRule]] = defaultdict(list)
        for rule in rules:
            rules_by_technician[rule.technician_id].append(rule)

        now = self._local_now()
        raw: list[TechnicianSlots] = []
        current = start_date
        while current <= end_date:
            for technician_id, tech_rules in rules_by_technician.items():
                raw.extend(await self._slots_for(technician_id, tech_rules, current, service, now))
            current += timedelta(days=1)

        slots = normalize(raw)
        self._logger.info(
            "Availability computed",
            extra={"salon_id": salon_id, "service": service.name, "count": len(slots)},
        )
        return AvailabilityResult(salon_id=salon_id, service=service, slots=slots)

    async def _slots_for(
        self,
        technician_id: int,
        rules: list[WeeklyRule],
        target_date: date,
        service: Service,
        now: datetime,
    ) -> list[TechnicianSlots]:
        if not any(rule.is_active_on(target_date) for rule in rules):
            return []

        agreements = await self._agreements.get_active_for_technician_on_date(target_date, technician_id)
        start_times = get_available_start_times(
            rules,
            target_date,
            service.duration_minutes,
            agreements,
            now,
            granularity_minutes=self._granularity,
        )
        if not start_times:
            return []
        return [
            TechnicianSlots(
                technician_id=technician_id,
                date=target_date,
                service=service,
                start_times=tuple(start_times),
            )
        ]
