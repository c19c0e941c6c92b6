from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BookingRequest:
    agreement_date: str  # YYYY-MM-DD
    start_time: str  # HH:mm or HH:mm:ss
    service_id: int
    technician_id: int
    salon_id: int
    client_email: str
    client_name: str


@dataclass(frozen=True)
class DayRangeInput:
    day: str  # "Monday".."Sunday"
    begin_time: str
    end_time: str


@dataclass(frozen=True)
class ScheduleInput:
    effective_start: str
    effective_end: str | None = None
    is_outage: bool = False
    time_ranges: list[DayRangeInput] = field(default_factory=list)
    release_window_days: int = 0


@dataclass(frozen=True)
class AppointmentInput:
    date: str
    time: str
    service_id: int
    client_name: str | None = None
    client_email: str | None = None
