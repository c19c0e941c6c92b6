from fastapi import APIRouter, Depends, HTTPException, Query

from salon_scheduler.api.v1.converters import salon_technicians_schema, service_schema, slots_schema
from salon_scheduler.api.v1.schemas import AvailabilityResponseSchema, SalonTechniciansSchema, ServiceSchema
from salon_scheduler.application.ports.catalog import CatalogPort
from salon_scheduler.application.use_cases.pull_availability import PullAvailabilityUseCase
from salon_scheduler.application.use_cases.salon_technicians import SalonTechniciansUseCase
from salon_scheduler.wiring.dependencies import (
    get_catalog,
    get_pull_availability_use_case,
    get_salon_technicians_use_case,
)

router = APIRouter()


@router.get("/availability", response_model=AvailabilityResponseSchema)
async def pull_availability(
    salon_id: int = Query(...),
    service_id: int = Query(...),
    date_begin: str = Query(...),
    date_end: str = Query(...),
    uc: PullAvailabilityUseCase = Depends(get_pull_availability_use_case),
):
    try:
        result = await uc.execute(salon_id, service_id, date_begin, date_end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result is None:
        raise HTTPException(status_code=404, detail="Salon, schedules or service not found")

    return AvailabilityResponseSchema(
        salon_id=result.salon_id,
        service=service_schema(result.service),
        slots=[slots_schema(s) for s in result.slots],
    )


@router.get("/services", response_model=list[ServiceSchema])
async def list_services(catalog: CatalogPort = Depends(get_catalog)):
    return [service_schema(s) for s in await catalog.list_services()]


@router.get("/salons/{salon_id}/technicians", response_model=SalonTechniciansSchema)
async def list_salon_technicians(
    salon_id: int,
    uc: SalonTechniciansUseCase = Depends(get_salon_technicians_use_case),
):
    result = await uc.execute(salon_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Salon or schedules not found")
    return salon_technicians_schema(result)
