from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class DayTimeRange:
    day_of_week: int  # date.weekday(): 0 = Monday
    begin_time: time
    end_time: time
    id: int | None = None

    @property
    def day_name(self) -> str:
        return WEEKDAY_NAMES[self.day_of_week]


@dataclass
class WeeklyRule:
    """
    A technician's recurring weekly availability.

    Rules are never deleted: deactivation closes them by setting
    effective_end so appointments already booked against them keep
    their history.
    """

    id: int | None
    technician_id: int
    salon_id: int
    effective_start: date
    effective_end: date | None = None
    is_outage: bool = False
    day_ranges: list[DayTimeRange] = field(default_factory=list)
    release_window_days: int = 0

    def is_active_on(self, target_date: date) -> bool:
        if target_date < self.effective_start:
            return False
        return self.effective_end is None or self.effective_end >= target_date

    def ranges_for(self, target_date: date) -> list[DayTimeRange]:
        """Day ranges that apply on target_date, or [] when the rule is not active."""
        if not self.is_active_on(target_date):
            return []
        weekday = target_date.weekday()
        return [r for r in self.day_ranges if r.day_of_week == weekday]

    def deactivate(self, today: date) -> None:
        self.effective_end = today
