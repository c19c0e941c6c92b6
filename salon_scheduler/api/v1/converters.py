from salon_scheduler.api.v1.schemas import (
    AppointmentSchema,
    CalendarDaySchema,
    ConflictSchema,
    DayRangeSchema,
    SalonTechniciansSchema,
    ScheduleSchema,
    ServiceSchema,
    TechnicianServicesSchema,
    TechnicianSlotsSchema,
)
from salon_scheduler.application.scheduling.availability import TechnicianSlots
from salon_scheduler.application.scheduling.conflicts import ConflictInfo
from salon_scheduler.application.use_cases.salon_technicians import SalonTechnicians
from salon_scheduler.application.use_cases.technician_calendar import CalendarDay
from salon_scheduler.application.utils.validators import format_time
from salon_scheduler.domain.entities.agreement import Agreement
from salon_scheduler.domain.entities.schedule import DayTimeRange, WeeklyRule
from salon_scheduler.domain.entities.service import Service


def service_schema(service: Service) -> ServiceSchema:
    return ServiceSchema(
        id=service.id,
        name=service.name,
        duration_minutes=service.duration_minutes,
        max_participants=service.max_participants,
    )


def slots_schema(slots: TechnicianSlots) -> TechnicianSlotsSchema:
    return TechnicianSlotsSchema(
        technician_id=slots.technician_id,
        date=slots.date,
        start_times=[format_time(t) for t in slots.start_times],
    )


def conflict_schema(conflict: ConflictInfo) -> ConflictSchema:
    return ConflictSchema(
        agreement_id=conflict.agreement_id,
        start_time=format_time(conflict.start_time),
        client_name=conflict.client_name,
        service_name=conflict.service_name,
    )


def schedule_schema(rule: WeeklyRule) -> ScheduleSchema:
    return ScheduleSchema(
        id=rule.id,
        technician_id=rule.technician_id,
        salon_id=rule.salon_id,
        effective_start=rule.effective_start,
        effective_end=rule.effective_end,
        is_outage=rule.is_outage,
        release_window_days=rule.release_window_days,
        time_ranges=[
            DayRangeSchema(day=r.day_name, begin_time=format_time(r.begin_time), end_time=format_time(r.end_time))
            for r in sorted(rule.day_ranges, key=lambda r: (r.day_of_week, r.begin_time))
        ],
    )


def appointment_schema(agreement: Agreement) -> AppointmentSchema:
    return AppointmentSchema(
        id=agreement.id,
        date=agreement.date,
        time=format_time(agreement.start_time),
        end_time=format_time(agreement.end_time),
        status=agreement.status.value,
        service=service_schema(agreement.service),
        technician_id=agreement.technician_id,
        client_name=agreement.client.name,
        client_email=agreement.client.email,
    )


def calendar_day_schema(day: CalendarDay) -> CalendarDaySchema:
    return CalendarDaySchema(
        technician_id=day.technician_id,
        date=day.date,
        rules=[_narrowed_schedule_schema(entry.rule, entry.ranges) for entry in day.rules],
        appointments=[appointment_schema(a) for a in day.appointments],
    )


def _narrowed_schedule_schema(rule: WeeklyRule, ranges: list[DayTimeRange]) -> ScheduleSchema:
    schema = schedule_schema(rule)
    schema.time_ranges = [
        DayRangeSchema(day=r.day_name, begin_time=format_time(r.begin_time), end_time=format_time(r.end_time))
        for r in ranges
    ]
    return schema


def salon_technicians_schema(result: SalonTechnicians) -> SalonTechniciansSchema:
    return SalonTechniciansSchema(
        salon_id=result.salon_id,
        technicians=[
            TechnicianServicesSchema(
                id=entry.technician.id,
                name=entry.technician.name,
                services=[service_schema(s) for s in entry.services],
            )
            for entry in result.technicians
        ],
    )
