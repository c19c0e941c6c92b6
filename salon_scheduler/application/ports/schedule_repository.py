from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduler.domain.entities.schedule import WeeklyRule


class ScheduleRepositoryPort(ABC):
    @abstractmethod
    async def get_by_id(self, rule_id: int) -> WeeklyRule | None:
        raise NotImplementedError

    @abstractmethod
    async def get_rules_for_salon(self, salon_id: int) -> list[WeeklyRule]:
        raise NotImplementedError

    @abstractmethod
    async def get_rules_for_technician(self, technician_id: int) -> list[WeeklyRule]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, rule: WeeklyRule) -> int:
        raise NotImplementedError

    @abstractmethod
    async def update(self, rule: WeeklyRule) -> bool:
        """Replace the stored rule, day ranges included (last write wins)."""
        raise NotImplementedError
