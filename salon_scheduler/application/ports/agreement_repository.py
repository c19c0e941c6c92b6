from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from salon_scheduler.domain.entities.agreement import Agreement, AppointmentStatus


class AgreementRepositoryPort(ABC):
    @abstractmethod
    async def save(self, agreement: Agreement) -> int:
        """Persist a new agreement. Returns its id."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, agreement: Agreement, expected_status: AppointmentStatus | None = None) -> bool:
        """
        Write back an agreement.

        When expected_status is given the write only happens if the stored
        status still equals it (compare-and-swap). Returns False if the row
        is missing or the stored status moved on.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, agreement_id: int) -> Agreement | None:
        raise NotImplementedError

    @abstractmethod
    async def get_active_for_technician_on_date(
        self,
        target_date: date,
        technician_id: int,
        exclude_id: int | None = None,
    ) -> list[Agreement]:
        """Pending and confirmed agreements only."""
        raise NotImplementedError

    @abstractmethod
    async def get_expired_pending(self, now: datetime) -> list[Agreement]:
        """Pending agreements whose expire_at is before now."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_confirm_token_hash(self, token_hash: str) -> Agreement | None:
        raise NotImplementedError
