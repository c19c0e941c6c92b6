from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Callable

from salon_scheduler.application.dto.requests import AppointmentInput
from salon_scheduler.application.ports.account_repository import AccountRepositoryPort
from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.application.ports.catalog import CatalogPort
from salon_scheduler.application.ports.email_sender import EmailSenderPort, NotificationKind
from salon_scheduler.application.scheduling.conflicts import ConflictInfo, find_conflicts
from salon_scheduler.application.utils.notifications import AppointmentNotifier
from salon_scheduler.application.utils.validators import (
    parse_date,
    parse_time,
    validate_email,
    validate_name,
)
from salon_scheduler.domain.entities.agreement import Agreement, AppointmentStatus

NowFn = Callable[[], datetime]

MAX_WRITE_ATTEMPTS = 3


class ChangeStatus(str, Enum):
    applied = "applied"
    conflicts = "conflicts"
    not_found = "not_found"
    not_editable = "not_editable"
    stale = "stale"


@dataclass(frozen=True)
class AppointmentChangeResult:
    status: ChangeStatus
    agreement_id: int | None = None
    conflicts: list[ConflictInfo] = field(default_factory=list)
    error: str | None = None


class ManageAppointmentsUseCase:
    """
    Technician-side appointment edits.

    Create and update run the conflict check first and only write when no
    active appointment overlaps or the caller passes force=True.
    """

    def __init__(
        self,
        agreements: AgreementRepositoryPort,
        catalog: CatalogPort,
        accounts: AccountRepositoryPort,
        email_sender: EmailSenderPort,
        salon_id: int,
        now_fn: NowFn | None = None,
    ) -> None:
        self._agreements = agreements
        self._catalog = catalog
        self._accounts = accounts
        self._notifier = AppointmentNotifier(email_sender)
        self._salon_id = salon_id
        self._now_fn = now_fn or (lambda: datetime.now(UTC))
        self._logger = logging.getLogger(__name__)

    async def get_appointment(self, agreement_id: int, technician_id: int) -> Agreement | None:
        agreement = await self._agreements.get_by_id(agreement_id)
        if agreement is None or agreement.technician_id != technician_id:
            return None
        return agreement

    async def create_appointment(
        self,
        technician_id: int,
        data: AppointmentInput,
        force: bool = False,
    ) -> AppointmentChangeResult:
        """Book directly on the technician's behalf; the appointment starts out confirmed."""
        target_date = parse_date(data.date)
        start_time = parse_time(data.time)
        client_name = validate_name(data.client_name)
        client_email = validate_email(data.client_email)

        service = await self._catalog.get_service(data.service_id)
        if service is None:
            return AppointmentChangeResult(status=ChangeStatus.not_found, error="Service not found.")

        technician = await self._accounts.get_technician(technician_id)
        if technician is None:
            return AppointmentChangeResult(status=ChangeStatus.not_found, error="Technician not found.")

        others = await self._agreements.get_active_for_technician_on_date(target_date, technician_id)
        conflicts = find_conflicts(target_date, start_time, service.duration_minutes, others)
        if conflicts and not force:
            return AppointmentChangeResult(
                status=ChangeStatus.conflicts,
                conflicts=conflicts,
                error="Overlapping appointments detected.",
            )

        client = await self._accounts.get_client_by_email(client_email)
        if client is None:
            client = await self._accounts.create_client(client_name, client_email)

        now = self._now_fn()
        agreement = Agreement(
            date=target_date,
            start_time=start_time,
            service=service,
            technician=technician,
            client=client,
            salon_id=self._salon_id,
            status=AppointmentStatus.confirmed,
            confirmed_at=now,
            created_at=now,
        )
        agreement_id = await self._agreements.save(agreement)
        self._logger.info(
            "Appointment created by technician",
            extra={"agreement_id": agreement_id, "technician_id": technician_id, "forced": bool(conflicts)},
        )

        await self._notifier.client(agreement, NotificationKind.booked)
        return AppointmentChangeResult(status=ChangeStatus.applied, agreement_id=agreement_id, conflicts=conflicts)

    async def update_appointment(
        self,
        agreement_id: int,
        technician_id: int,
        data: AppointmentInput,
        force: bool = False,
    ) -> AppointmentChangeResult:
        """
        Move an appointment or change its service.

        The write only lands if the stored status is still the one that was
        read, so a confirmation or expiry that happens meanwhile is never
        overwritten. On a lost race the row is re-read and the edit retried.
        """
        new_date = parse_date(data.date)
        new_time = parse_time(data.time)

        service = await self._catalog.get_service(data.service_id)
        if service is None:
            return AppointmentChangeResult(status=ChangeStatus.not_found, error="Service not found.")

        for _ in range(MAX_WRITE_ATTEMPTS):
            current = await self.get_appointment(agreement_id, technician_id)
            if current is None:
                return AppointmentChangeResult(status=ChangeStatus.not_found, error="Appointment not found.")
            if not current.is_active:
                return AppointmentChangeResult(
                    status=ChangeStatus.not_editable,
                    agreement_id=agreement_id,
                    error=f"A {current.status.value} appointment cannot be changed.",
                )

            others = await self._agreements.get_active_for_technician_on_date(
                new_date, technician_id, exclude_id=agreement_id
            )
            conflicts = find_conflicts(
                new_date, new_time, service.duration_minutes, others, exclude_agreement_id=agreement_id
            )
            if conflicts and not force:
                return AppointmentChangeResult(
                    status=ChangeStatus.conflicts,
                    agreement_id=agreement_id,
                    conflicts=conflicts,
                    error="Overlapping appointments detected.",
                )

            updated = dataclasses.replace(current, date=new_date, start_time=new_time, service=service)
            if await self._agreements.update(updated, expected_status=current.status):
                self._logger.info(
                    "Appointment updated",
                    extra={"agreement_id": agreement_id, "technician_id": technician_id, "forced": bool(conflicts)},
                )
                await self._notifier.technician(updated, NotificationKind.modified, previous=current)
                await self._notifier.client(updated, NotificationKind.modified, previous=current)
                return AppointmentChangeResult(
                    status=ChangeStatus.applied, agreement_id=agreement_id, conflicts=conflicts
                )

            self._logger.info(
                "Appointment status changed during edit, retrying",
                extra={"agreement_id": agreement_id, "status": current.status.value},
            )

        return AppointmentChangeResult(
            status=ChangeStatus.stale,
            agreement_id=agreement_id,
            error="Appointment kept changing, please try again.",
        )

    async def cancel_appointment(self, agreement_id: int, technician_id: int) -> AppointmentChangeResult:
        for _ in range(MAX_WRITE_ATTEMPTS):
            agreement = await self.get_appointment(agreement_id, technician_id)
            if agreement is None:
                return AppointmentChangeResult(status=ChangeStatus.not_found, error="Appointment not found.")

            previous_status = agreement.status
            if not agreement.cancel():
                # already cancelled: nothing to write or announce
                return AppointmentChangeResult(status=ChangeStatus.applied, agreement_id=agreement_id)

            if await self._agreements.update(agreement, expected_status=previous_status):
                self._logger.info(
                    "Appointment cancelled",
                    extra={"agreement_id": agreement_id, "technician_id": technician_id},
                )
                await self._notifier.technician(agreement, NotificationKind.cancelled)
                await self._notifier.client(agreement, NotificationKind.cancelled)
                return AppointmentChangeResult(status=ChangeStatus.applied, agreement_id=agreement_id)

            self._logger.info(
                "Appointment status changed during cancel, retrying",
                extra={"agreement_id": agreement_id, "status": previous_status.value},
            )

        return AppointmentChangeResult(
            status=ChangeStatus.stale,
            agreement_id=agreement_id,
            error="Appointment kept changing, please try again.",
        )
