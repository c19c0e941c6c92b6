from __future__ import annotations

import asyncio
import copy
import itertools
from datetime import date, datetime

from salon_scheduler.application.ports.account_repository import AccountRepositoryPort
from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.application.ports.catalog import CatalogPort
from salon_scheduler.application.ports.schedule_repository import ScheduleRepositoryPort
from salon_scheduler.domain.entities.account import Client, Technician
from salon_scheduler.domain.entities.agreement import Agreement, AppointmentStatus
from salon_scheduler.domain.entities.salon import Salon
from salon_scheduler.domain.entities.schedule import WeeklyRule
from salon_scheduler.domain.entities.service import Service


class MemoryAgreementRepository(AgreementRepositoryPort):
    """
    In-process agreement table.

    Rows are copied on the way in and out so callers never share an
    instance, matching how a database hands back fresh objects per query.
    """

    def __init__(self) -> None:
        self._rows: dict[int, Agreement] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def save(self, agreement: Agreement) -> int:
        async with self._lock:
            agreement_id = next(self._ids)
            agreement.id = agreement_id
            self._rows[agreement_id] = copy.deepcopy(agreement)
            return agreement_id

    async def update(self, agreement: Agreement, expected_status: AppointmentStatus | None = None) -> bool:
        async with self._lock:
            stored = self._rows.get(agreement.id) if agreement.id is not None else None
            if stored is None:
                return False
            if expected_status is not None and stored.status != expected_status:
                return False
            self._rows[agreement.id] = copy.deepcopy(agreement)
            return True

    async def get_by_id(self, agreement_id: int) -> Agreement | None:
        row = self._rows.get(agreement_id)
        return copy.deepcopy(row) if row is not None else None

    async def get_active_for_technician_on_date(
        self,
        target_date: date,
        technician_id: int,
        exclude_id: int | None = None,
    ) -> list[Agreement]:
        return [
            copy.deepcopy(row)
            for row in self._rows.values()
            if row.date == target_date
            and row.technician_id == technician_id
            and row.is_active
            and (exclude_id is None or row.id != exclude_id)
        ]

    async def get_expired_pending(self, now: datetime) -> list[Agreement]:
        return [
            copy.deepcopy(row)
            for row in self._rows.values()
            if row.status == AppointmentStatus.pending
            and row.expire_at is not None
            and row.expire_at < now
        ]

    async def get_by_confirm_token_hash(self, token_hash: str) -> Agreement | None:
        for row in self._rows.values():
            if row.confirm_token_hash == token_hash:
                return copy.deepcopy(row)
        return None


class MemoryScheduleRepository(ScheduleRepositoryPort):
    def __init__(self, rules: list[WeeklyRule] | None = None) -> None:
        self._rules: dict[int, WeeklyRule] = {}
        self._ids = itertools.count(1)
        for rule in rules or []:
            rule_id = rule.id if rule.id is not None else next(self._ids)
            self._rules[rule_id] = copy.deepcopy(rule)
            self._rules[rule_id].id = rule_id
        if self._rules:
            self._ids = itertools.count(max(self._rules) + 1)

    async def get_by_id(self, rule_id: int) -> WeeklyRule | None:
        rule = self._rules.get(rule_id)
        return copy.deepcopy(rule) if rule is not None else None

    async def get_rules_for_salon(self, salon_id: int) -> list[WeeklyRule]:
        return [copy.deepcopy(r) for r in self._rules.values() if r.salon_id == salon_id]

    async def get_rules_for_technician(self, technician_id: int) -> list[WeeklyRule]:
        return [copy.deepcopy(r) for r in self._rules.values() if r.technician_id == technician_id]

    async def save(self, rule: WeeklyRule) -> int:
        rule_id = next(self._ids)
        rule.id = rule_id
        self._rules[rule_id] = copy.deepcopy(rule)
        return rule_id

    async def update(self, rule: WeeklyRule) -> bool:
        if rule.id is None or rule.id not in self._rules:
            return False
        self._rules[rule.id] = copy.deepcopy(rule)
        return True


class MemoryCatalog(CatalogPort):
    def __init__(self, services: list[Service] | None = None, salons: list[Salon] | None = None) -> None:
        self._services = {s.id: s for s in services or []}
        self._salons = {s.id: s for s in salons or []}

    async def get_service(self, service_id: int) -> Service | None:
        return self._services.get(service_id)

    async def list_services(self) -> list[Service]:
        return sorted(self._services.values(), key=lambda s: s.id)

    async def get_salon(self, salon_id: int) -> Salon | None:
        return self._salons.get(salon_id)


class MemoryAccountRepository(AccountRepositoryPort):
    def __init__(self, technicians: list[Technician] | None = None, clients: list[Client] | None = None) -> None:
        self._technicians = {t.id: t for t in technicians or []}
        self._clients = {c.id: c for c in clients or []}
        self._client_ids = itertools.count(max(self._clients, default=0) + 1)

    async def get_technician(self, technician_id: int) -> Technician | None:
        return self._technicians.get(technician_id)

    async def get_client(self, client_id: int) -> Client | None:
        return self._clients.get(client_id)

    async def get_client_by_email(self, email: str) -> Client | None:
        normalized = email.strip().lower()
        for client in self._clients.values():
            if client.email.lower() == normalized:
                return client
        return None

    async def create_client(self, name: str, email: str) -> Client:
        client = Client(id=next(self._client_ids), name=name.strip(), email=email.strip())
        self._clients[client.id] = client
        return client
