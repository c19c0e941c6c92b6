from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduler.domain.entities.account import Client, Technician


class AccountRepositoryPort(ABC):
    @abstractmethod
    async def get_technician(self, technician_id: int) -> Technician | None:
        raise NotImplementedError

    @abstractmethod
    async def get_client(self, client_id: int) -> Client | None:
        raise NotImplementedError

    @abstractmethod
    async def get_client_by_email(self, email: str) -> Client | None:
        raise NotImplementedError

    @abstractmethod
    async def create_client(self, name: str, email: str) -> Client:
        raise NotImplementedError
