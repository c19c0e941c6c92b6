from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from salon_scheduler.application.dto.requests import ScheduleInput
from salon_scheduler.application.exceptions import ValidationError
from salon_scheduler.application.ports.schedule_repository import ScheduleRepositoryPort
from salon_scheduler.application.utils.validators import (
    parse_date,
    parse_day_of_week,
    parse_optional_date,
    parse_time,
    validate_time_range,
)
from salon_scheduler.domain.entities.schedule import WEEKDAY_NAMES, DayTimeRange, WeeklyRule

NowFn = Callable[[], datetime]


class ManageSchedulesUseCase:
    def __init__(
        self,
        schedules: ScheduleRepositoryPort,
        salon_id: int,
        timezone: ZoneInfo,
        now_fn: NowFn | None = None,
    ) -> None:
        self._schedules = schedules
        self._salon_id = salon_id
        self._timezone = timezone
        self._now_fn = now_fn or (lambda: datetime.now(UTC))
        self._logger = logging.getLogger(__name__)

    async def get_rule(self, rule_id: int, technician_id: int) -> WeeklyRule | None:
        rule = await self._schedules.get_by_id(rule_id)
        if rule is None or rule.technician_id != technician_id:
            return None
        return rule

    async def list_rules(self, technician_id: int) -> list[WeeklyRule]:
        rules = await self._schedules.get_rules_for_technician(technician_id)
        return sorted(rules, key=lambda r: (r.effective_start, r.id or 0))

    async def create_rule(self, technician_id: int, data: ScheduleInput) -> int:
        rule = WeeklyRule(
            id=None,
            technician_id=technician_id,
            salon_id=self._salon_id,
            effective_start=parse_date(data.effective_start, "effectiveStart"),
        )
        self._apply(rule, data)
        rule_id = await self._schedules.save(rule)
        self._logger.info("Schedule created", extra={"technician_id": technician_id, "rule_id": rule_id})
        return rule_id

    async def update_rule(self, rule_id: int, technician_id: int, data: ScheduleInput) -> bool:
        rule = await self.get_rule(rule_id, technician_id)
        if rule is None:
            return False
        self._apply(rule, data)
        updated = await self._schedules.update(rule)
        self._logger.info("Schedule updated", extra={"technician_id": technician_id, "rule_id": rule_id})
        return updated

    async def deactivate_rule(self, rule_id: int, technician_id: int) -> bool:
        """Close the rule as of today. The row is kept so past bookings still reference it."""
        rule = await self.get_rule(rule_id, technician_id)
        if rule is None:
            return False
        rule.deactivate(self._today())
        updated = await self._schedules.update(rule)
        self._logger.info("Schedule deactivated", extra={"technician_id": technician_id, "rule_id": rule_id})
        return updated

    def _today(self):
        now = self._now_fn()
        if now.tzinfo is not None:
            now = now.astimezone(self._timezone)
        return now.date()

    @staticmethod
    def _apply(rule: WeeklyRule, data: ScheduleInput) -> None:
        # parse everything first so a bad range leaves the rule untouched
        effective_start = parse_date(data.effective_start, "effectiveStart")
        effective_end = parse_optional_date(data.effective_end, "effectiveEnd")
        if effective_end is not None and effective_end < effective_start:
            raise ValidationError("Effective end date must not be before the start date.")
        if data.release_window_days < 0:
            raise ValidationError("Release window cannot be negative.")

        ranges: list[DayTimeRange] = []
        for item in data.time_ranges:
            day = parse_day_of_week(item.day)
            day_name = WEEKDAY_NAMES[day]
            begin = parse_time(item.begin_time, f"begin time for {day_name}")
            end = parse_time(item.end_time, f"end time for {day_name}")
            validate_time_range(begin, end, day_name)
            ranges.append(DayTimeRange(day_of_week=day, begin_time=begin, end_time=end))

        rule.effective_start = effective_start
        rule.effective_end = effective_end
        rule.is_outage = data.is_outage
        rule.day_ranges = ranges
        rule.release_window_days = data.release_window_days
