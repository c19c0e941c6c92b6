from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from salon_scheduler.api.v1.converters import (
    appointment_schema,
    calendar_day_schema,
    conflict_schema,
    schedule_schema,
)
from salon_scheduler.api.v1.schemas import (
    AppointmentChangeResponseSchema,
    AppointmentRequestSchema,
    AppointmentSchema,
    CalendarDaySchema,
    CreatedSchema,
    ScheduleRequestSchema,
    ScheduleSchema,
)
from salon_scheduler.application.dto.requests import AppointmentInput, DayRangeInput, ScheduleInput
from salon_scheduler.application.use_cases.manage_appointments import (
    AppointmentChangeResult,
    ChangeStatus,
    ManageAppointmentsUseCase,
)
from salon_scheduler.application.use_cases.manage_schedules import ManageSchedulesUseCase
from salon_scheduler.application.use_cases.technician_calendar import TechnicianCalendarUseCase
from salon_scheduler.wiring.dependencies import (
    get_manage_appointments_use_case,
    get_manage_schedules_use_case,
    get_technician_calendar_use_case,
)

router = APIRouter()


def _schedule_input(req: ScheduleRequestSchema) -> ScheduleInput:
    return ScheduleInput(
        effective_start=req.effective_start,
        effective_end=req.effective_end,
        is_outage=req.is_outage,
        time_ranges=[DayRangeInput(day=r.day, begin_time=r.begin_time, end_time=r.end_time) for r in req.time_ranges],
        release_window_days=req.release_window_days,
    )


def _appointment_input(req: AppointmentRequestSchema) -> AppointmentInput:
    return AppointmentInput(
        date=req.date,
        time=req.time,
        service_id=req.service_id,
        client_name=req.client_name,
        client_email=req.client_email,
    )


def _change_response(result: AppointmentChangeResult) -> AppointmentChangeResponseSchema:
    conflicts = [conflict_schema(c) for c in result.conflicts]
    if result.status == ChangeStatus.not_found:
        raise HTTPException(status_code=404, detail=result.error)
    if result.status in (ChangeStatus.not_editable, ChangeStatus.stale):
        raise HTTPException(status_code=409, detail=result.error)
    if result.status == ChangeStatus.conflicts:
        raise HTTPException(
            status_code=409,
            detail={"status": "overlap", "message": result.error, "conflicts": [c.model_dump() for c in conflicts]},
        )
    return AppointmentChangeResponseSchema(
        status=result.status.value,
        agreement_id=result.agreement_id,
        conflicts=conflicts,
    )


@router.get("/technicians/{technician_id}/schedules", response_model=list[ScheduleSchema])
async def list_schedules(
    technician_id: int,
    uc: ManageSchedulesUseCase = Depends(get_manage_schedules_use_case),
):
    return [schedule_schema(r) for r in await uc.list_rules(technician_id)]


@router.get("/technicians/{technician_id}/schedules/{rule_id}", response_model=ScheduleSchema)
async def get_schedule(
    technician_id: int,
    rule_id: int,
    uc: ManageSchedulesUseCase = Depends(get_manage_schedules_use_case),
):
    rule = await uc.get_rule(rule_id, technician_id)
    if rule is None:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule_schema(rule)


@router.post("/technicians/{technician_id}/schedules", response_model=CreatedSchema, status_code=201)
async def create_schedule(
    technician_id: int,
    req: ScheduleRequestSchema,
    uc: ManageSchedulesUseCase = Depends(get_manage_schedules_use_case),
):
    try:
        rule_id = await uc.create_rule(technician_id, _schedule_input(req))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CreatedSchema(id=rule_id)


@router.put("/technicians/{technician_id}/schedules/{rule_id}", response_model=ScheduleSchema)
async def update_schedule(
    technician_id: int,
    rule_id: int,
    req: ScheduleRequestSchema,
    uc: ManageSchedulesUseCase = Depends(get_manage_schedules_use_case),
):
    try:
        updated = await uc.update_rule(rule_id, technician_id, _schedule_input(req))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule_schema(await uc.get_rule(rule_id, technician_id))


@router.post("/technicians/{technician_id}/schedules/{rule_id}/deactivate", response_model=ScheduleSchema)
async def deactivate_schedule(
    technician_id: int,
    rule_id: int,
    uc: ManageSchedulesUseCase = Depends(get_manage_schedules_use_case),
):
    if not await uc.deactivate_rule(rule_id, technician_id):
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule_schema(await uc.get_rule(rule_id, technician_id))


@router.get("/technicians/{technician_id}/appointments/{agreement_id}", response_model=AppointmentSchema)
async def get_appointment(
    technician_id: int,
    agreement_id: int,
    uc: ManageAppointmentsUseCase = Depends(get_manage_appointments_use_case),
):
    agreement = await uc.get_appointment(agreement_id, technician_id)
    if agreement is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment_schema(agreement)


@router.post(
    "/technicians/{technician_id}/appointments",
    response_model=AppointmentChangeResponseSchema,
    status_code=201,
)
async def create_appointment(
    technician_id: int,
    req: AppointmentRequestSchema,
    force: bool = Query(False),
    uc: ManageAppointmentsUseCase = Depends(get_manage_appointments_use_case),
):
    try:
        result = await uc.create_appointment(technician_id, _appointment_input(req), force=force)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _change_response(result)


@router.put(
    "/technicians/{technician_id}/appointments/{agreement_id}",
    response_model=AppointmentChangeResponseSchema,
)
async def update_appointment(
    technician_id: int,
    agreement_id: int,
    req: AppointmentRequestSchema,
    force: bool = Query(False),
    uc: ManageAppointmentsUseCase = Depends(get_manage_appointments_use_case),
):
    try:
        result = await uc.update_appointment(agreement_id, technician_id, _appointment_input(req), force=force)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _change_response(result)


@router.post("/technicians/{technician_id}/appointments/{agreement_id}/cancel", response_model=AppointmentSchema)
async def cancel_appointment(
    technician_id: int,
    agreement_id: int,
    uc: ManageAppointmentsUseCase = Depends(get_manage_appointments_use_case),
):
    _change_response(await uc.cancel_appointment(agreement_id, technician_id))
    return appointment_schema(await uc.get_appointment(agreement_id, technician_id))


@router.get("/technicians/{technician_id}/calendar/{day}", response_model=CalendarDaySchema)
async def get_calendar_day(
    technician_id: int,
    day: str,
    uc: TechnicianCalendarUseCase = Depends(get_technician_calendar_use_case),
):
    try:
        result = await uc.get_day(technician_id, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Technician not found")
    return calendar_day_schema(result)
