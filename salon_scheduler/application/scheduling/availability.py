"""
Availability Engine

Turns a technician's weekly rules into concrete bookable start times for a
date, considering:
- Rule effective dates
- Time-of-day cutoff for today and earlier (ranges whose begin time has
  passed are dropped whole)
- Existing pending/confirmed appointments
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable

from salon_scheduler.application.scheduling.overlap import interval_on, overlaps
from salon_scheduler.domain.entities.agreement import Agreement
from salon_scheduler.domain.entities.schedule import DayTimeRange, WeeklyRule
from salon_scheduler.domain.entities.service import Service

DEFAULT_GRANULARITY_MINUTES = 5


@dataclass(frozen=True)
class TechnicianSlots:
    technician_id: int
    date: date
    service: Service
    start_times: tuple[time, ...] = field(default_factory=tuple)


def get_available_start_times(
    rules: Iterable[WeeklyRule],
    target_date: date,
    service_duration: int,
    existing_agreements: Iterable[Agreement],
    now: datetime,
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
) -> list[time]:
    """
    Bookable start times for one technician on target_date.

    Args:
        rules: the technician's weekly rules (inactive ones are skipped)
        target_date: the day to compute
        service_duration: minutes the requested service takes
        existing_agreements: the technician's agreements that day; only
            pending/confirmed ones block
        now: current time in the salon timezone
        granularity_minutes: step between candidate start times

    Returns:
        list[time]: ascending, de-duplicated start times

    Algorithm:
        1. Drop rules not active on target_date
        2. For each matching day range, step from begin_time while
           candidate + duration <= end_time
        3. On today or an earlier date skip ranges whose begin_time is
           before now.time()
        4. Remove candidates overlapping an existing appointment
        5. Sort
    """
    if granularity_minutes <= 0:
        raise ValueError("granularity_minutes must be positive")
    if service_duration <= 0:
        raise ValueError("service_duration must be positive")

    today = now.date()

    candidates: set[time] = set()
    for rule in rules:
        # is_outage is stored but not subtracted from availability
        for day_range in rule.ranges_for(target_date):
            # past dates get the same time-of-day cutoff as today
            if target_date <= today and now.time() > day_range.begin_time:
                continue
            candidates.update(_candidates_in_range(target_date, day_range, service_duration, granularity_minutes))

    blocking = [a for a in existing_agreements if a.is_active]
    if not blocking:
        return sorted(candidates)

    available = [
        c for c in candidates
        if not _overlaps_any(target_date, c, service_duration, blocking)
    ]
    return sorted(available)


def _candidates_in_range(
    target_date: date,
    day_range: DayTimeRange,
    service_duration: int,
    granularity_minutes: int,
) -> list[time]:
    range_end = datetime.combine(target_date, day_range.end_time)
    current = datetime.combine(target_date, day_range.begin_time)
    duration = timedelta(minutes=service_duration)
    step = timedelta(minutes=granularity_minutes)

    result: list[time] = []
    while current + duration <= range_end:
        result.append(current.time())
        current += step
    return result


def _overlaps_any(target_date: date, start: time, duration: int, agreements: list[Agreement]) -> bool:
    slot_start, slot_end = interval_on(target_date, start, duration)
    for agreement in agreements:
        if overlaps(slot_start, slot_end, agreement.starts_at, agreement.ends_at):
            return True
    return False


def normalize(items: Iterable[TechnicianSlots]) -> list[TechnicianSlots]:
    """
    Merge per-rule results into one entry per (technician, date, service).

    Start times are de-duplicated and sorted; entries are ordered by date,
    then technician. Normalizing normalized output returns it unchanged.
    """
    groups: dict[tuple[int, date, int], list[TechnicianSlots]] = defaultdict(list)
    for item in items:
        groups[(item.technician_id, item.date, item.service.id)].append(item)

    merged = []
    for (technician_id, slot_date, _service_id), group in groups.items():
        start_times = sorted({t for item in group for t in item.start_times})
        merged.append(
            TechnicianSlots(
                technician_id=technician_id,
                date=slot_date,
                service=group[0].service,
                start_times=tuple(start_times),
            )
        )

    merged.sort(key=lambda s: (s.date, s.technician_id, s.service.id))
    return merged
