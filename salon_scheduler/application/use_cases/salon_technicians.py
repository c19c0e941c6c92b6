from __future__ import annotations

from dataclasses import dataclass, field

from salon_scheduler.application.ports.account_repository import AccountRepositoryPort
from salon_scheduler.application.ports.catalog import CatalogPort
from salon_scheduler.application.ports.schedule_repository import ScheduleRepositoryPort
from salon_scheduler.domain.entities.account import Technician
from salon_scheduler.domain.entities.service import Service


@dataclass(frozen=True)
class TechnicianServices:
    technician: Technician
    services: list[Service] = field(default_factory=list)


@dataclass(frozen=True)
class SalonTechnicians:
    salon_id: int
    technicians: list[TechnicianServices] = field(default_factory=list)


class SalonTechniciansUseCase:
    """Lists the technicians who hold a schedule at a salon, each with the services they offer."""

    def __init__(
        self,
        schedules: ScheduleRepositoryPort,
        accounts: AccountRepositoryPort,
        catalog: CatalogPort,
    ) -> None:
        self._schedules = schedules
        self._accounts = accounts
        self._catalog = catalog

    async def execute(self, salon_id: int) -> SalonTechnicians | None:
        salon = await self._catalog.get_salon(salon_id)
        if salon is None:
            return None

        rules = await self._schedules.get_rules_for_salon(salon_id)
        if not rules:
            return None

        entries: list[TechnicianServices] = []
        for technician_id in sorted({r.technician_id for r in rules}):
            technician = await self._accounts.get_technician(technician_id)
            if technician is None:
                continue
            services = []
            for service_id in technician.service_ids:
                service = await self._catalog.get_service(service_id)
                if service is not None:
                    services.append(service)
            entries.append(TechnicianServices(technician=technician, services=services))

        return SalonTechnicians(salon_id=salon.id, technicians=entries)
