import datetime as dt
from pydantic import BaseModel, Field


class ServiceSchema(BaseModel):
    id: int
    name: str
    duration_minutes: int
    max_participants: int = 1


class TechnicianSlotsSchema(BaseModel):
    technician_id: int
    date: dt.date
    start_times: list[str] = Field(default_factory=list)  # HH:mm


class AvailabilityResponseSchema(BaseModel):
    salon_id: int
    service: ServiceSchema
    slots: list[TechnicianSlotsSchema] = Field(default_factory=list)


class BookingRequestSchema(BaseModel):
    agreement_date: str
    start_time: str
    service_id: int
    technician_id: int
    salon_id: int
    client_email: str
    client_name: str


class ConflictSchema(BaseModel):
    agreement_id: int | None = None
    start_time: str
    client_name: str
    service_name: str


class BookingResponseSchema(BaseModel):
    agreement_id: int
    status: str
    confirmation_sent: bool
    message: str | None = None


class ConfirmationRequestSchema(BaseModel):
    token: str


class ConfirmationResponseSchema(BaseModel):
    outcome: str
    message: str


class DayRangeSchema(BaseModel):
    day: str
    begin_time: str
    end_time: str


class ScheduleRequestSchema(BaseModel):
    effective_start: str
    effective_end: str | None = None
    is_outage: bool = False
    time_ranges: list[DayRangeSchema] = Field(default_factory=list)
    release_window_days: int = 0


class ScheduleSchema(BaseModel):
    id: int
    technician_id: int
    salon_id: int
    effective_start: dt.date
    effective_end: dt.date | None = None
    is_outage: bool = False
    release_window_days: int = 0
    time_ranges: list[DayRangeSchema] = Field(default_factory=list)


class CreatedSchema(BaseModel):
    id: int


class AppointmentRequestSchema(BaseModel):
    date: str
    time: str
    service_id: int
    client_name: str | None = None
    client_email: str | None = None


class AppointmentSchema(BaseModel):
    id: int
    date: dt.date
    time: str
    end_time: str
    status: str
    service: ServiceSchema
    technician_id: int
    client_name: str
    client_email: str


class AppointmentChangeResponseSchema(BaseModel):
    status: str
    agreement_id: int | None = None
    conflicts: list[ConflictSchema] = Field(default_factory=list)


class CalendarDaySchema(BaseModel):
    technician_id: int
    date: dt.date
    rules: list[ScheduleSchema] = Field(default_factory=list)  # time_ranges narrowed to this weekday
    appointments: list[AppointmentSchema] = Field(default_factory=list)


class TechnicianServicesSchema(BaseModel):
    id: int
    name: str
    services: list[ServiceSchema] = Field(default_factory=list)


class SalonTechniciansSchema(BaseModel):
    salon_id: int
    technicians: list[TechnicianServicesSchema] = Field(default_factory=list)
