from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduler.domain.entities.salon import Salon
from salon_scheduler.domain.entities.service import Service


class CatalogPort(ABC):
    @abstractmethod
    async def get_service(self, service_id: int) -> Service | None:
        raise NotImplementedError

    @abstractmethod
    async def list_services(self) -> list[Service]:
        raise NotImplementedError

    @abstractmethod
    async def get_salon(self, salon_id: int) -> Salon | None:
        raise NotImplementedError
