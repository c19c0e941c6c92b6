from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Callable

from salon_scheduler.application.dto.requests import BookingRequest
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
from salon_scheduler.domain.entities.agreement import CONFIRMATION_HOLD_MINUTES, Agreement

NowFn = Callable[[], datetime]


class BookingStatus(str, Enum):
    pending = "pending"
    not_found = "not_found"
    slot_taken = "slot_taken"


@dataclass(frozen=True)
class BookingResult:
    status: BookingStatus
    agreement_id: int | None = None
    confirmation_sent: bool = False
    error: str | None = None
    conflicts: list[ConflictInfo] = field(default_factory=list)


class BookingUseCase:
    def __init__(
        self,
        agreements: AgreementRepositoryPort,
        catalog: CatalogPort,
        accounts: AccountRepositoryPort,
        email_sender: EmailSenderPort,
        hold_minutes: int = CONFIRMATION_HOLD_MINUTES,
        now_fn: NowFn | None = None,
    ) -> None:
        self._agreements = agreements
        self._catalog = catalog
        self._accounts = accounts
        self._notifier = AppointmentNotifier(email_sender)
        self._hold_minutes = hold_minutes
        self._now_fn = now_fn or (lambda: datetime.now(UTC))
        self._logger = logging.getLogger(__name__)

    async def book(self, request: BookingRequest) -> BookingResult:
        """
        Reserve a slot pending email confirmation.

        Input is validated before anything is written. The agreement is saved
        before the confirmation link goes out, so a failed email leaves a
        pending booking behind (reported via confirmation_sent=False) that
        the sweeper expires if never confirmed.
        """
        self._logger.info("Processing booking request", extra={"email": request.client_email})

        agreement_date = parse_date(request.agreement_date, "agreementDate")
        start_time = parse_time(request.start_time, "startTime")
        client_email = validate_email(request.client_email)
        client_name = validate_name(request.client_name)

        service = await self._catalog.get_service(request.service_id)
        if service is None:
            return BookingResult(status=BookingStatus.not_found, error="Service not found")

        technician = await self._accounts.get_technician(request.technician_id)
        if technician is None:
            return BookingResult(status=BookingStatus.not_found, error=f"Technician {request.technician_id} not found")

        salon = await self._catalog.get_salon(request.salon_id)
        if salon is None:
            return BookingResult(status=BookingStatus.not_found, error="Salon not found")

        existing = await self._agreements.get_active_for_technician_on_date(agreement_date, technician.id)
        conflicts = find_conflicts(agreement_date, start_time, service.duration_minutes, existing)
        if conflicts:
            self._logger.info(
                "Requested slot is no longer free",
                extra={"technician_id": technician.id, "count": len(conflicts)},
            )
            return BookingResult(
                status=BookingStatus.slot_taken,
                error="Requested time is no longer available",
                conflicts=conflicts,
            )

        client = await self._accounts.get_client_by_email(client_email)
        if client is None:
            client = await self._accounts.create_client(client_name, client_email)

        now = self._now_fn()
        agreement = Agreement(
            date=agreement_date,
            start_time=start_time,
            service=service,
            technician=technician,
            client=client,
            salon_id=salon.id,
            created_at=now,
        )
        token = agreement.mark_pending(now, self._hold_minutes)
        agreement_id = await self._agreements.save(agreement)
        self._logger.info(
            "Agreement saved",
            extra={"agreement_id": agreement_id, "technician_id": technician.id, "status": agreement.status.value},
        )

        confirmation_sent = await self._notifier.confirmation_link(agreement, token)
        await self._notifier.technician(agreement, NotificationKind.booked)

        return BookingResult(
            status=BookingStatus.pending,
            agreement_id=agreement_id,
            confirmation_sent=confirmation_sent,
            error=None if confirmation_sent else "Booking saved but failed to send confirmation email",
        )
