from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Callable

from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.application.ports.email_sender import EmailSenderPort
from salon_scheduler.application.utils.notifications import AppointmentNotifier
from salon_scheduler.domain.entities.agreement import (
    CONFIRMATION_HOLD_MINUTES,
    Agreement,
    AppointmentStatus,
    hash_token,
)

NowFn = Callable[[], datetime]


class ConfirmationOutcome(str, Enum):
    not_found = "not_found"
    confirmed = "confirmed"
    already_confirmed = "already_confirmed"
    expired_reissued = "expired_reissued"
    cancelled = "cancelled"


class ResolveConfirmationUseCase:
    """
    Handles a click on an emailed confirmation link.

    pending   -> confirmed, final confirmation email
    confirmed -> no change, final confirmation email re-sent
    expired   -> new token issued and a fresh link emailed
    cancelled -> reported, nothing sent
    """

    def __init__(
        self,
        repository: AgreementRepositoryPort,
        email_sender: EmailSenderPort,
        hold_minutes: int = CONFIRMATION_HOLD_MINUTES,
        now_fn: NowFn | None = None,
    ) -> None:
        self._repository = repository
        self._notifier = AppointmentNotifier(email_sender)
        self._hold_minutes = hold_minutes
        self._now_fn = now_fn or (lambda: datetime.now(UTC))
        self._logger = logging.getLogger(__name__)

    async def resolve_token(self, token: str) -> ConfirmationOutcome:
        if not token or not token.strip():
            return ConfirmationOutcome.not_found
        return await self.resolve(hash_token(token.strip()))

    async def resolve(self, token_hash: str) -> ConfirmationOutcome:
        agreement = await self._repository.get_by_confirm_token_hash(token_hash)
        if agreement is None:
            self._logger.info("No appointment found for confirmation token")
            return ConfirmationOutcome.not_found

        outcome = await self._dispatch(agreement)
        self._logger.info(
            "Confirmation token resolved",
            extra={"agreement_id": agreement.id, "status": agreement.status.value, "outcome": outcome.value},
        )
        return outcome

    async def _dispatch(self, agreement: Agreement) -> ConfirmationOutcome:
        if agreement.status == AppointmentStatus.pending:
            return await self._confirm(agreement)

        if agreement.status == AppointmentStatus.confirmed:
            await self._notifier.final_confirmation(agreement)
            return ConfirmationOutcome.already_confirmed

        if agreement.status == AppointmentStatus.expired:
            return await self._reissue(agreement)

        return ConfirmationOutcome.cancelled

    async def _confirm(self, agreement: Agreement) -> ConfirmationOutcome:
        agreement.confirm(self._now_fn())
        if not await self._repository.update(agreement, expected_status=AppointmentStatus.pending):
            return await self._after_lost_race(agreement.id)

        await self._notifier.final_confirmation(agreement)
        return ConfirmationOutcome.confirmed

    async def _reissue(self, agreement: Agreement) -> ConfirmationOutcome:
        token = agreement.mark_pending(self._now_fn(), self._hold_minutes)
        if not await self._repository.update(agreement, expected_status=AppointmentStatus.expired):
            # another request already re-issued or cancelled it
            current = await self._repository.get_by_id(agreement.id)
            if current is not None and current.status == AppointmentStatus.cancelled:
                return ConfirmationOutcome.cancelled
            return ConfirmationOutcome.expired_reissued

        await self._notifier.confirmation_link(agreement, token)
        return ConfirmationOutcome.expired_reissued

    async def _after_lost_race(self, agreement_id: int | None) -> ConfirmationOutcome:
        """Stored status changed between read and write; report it without a second email."""
        current = await self._repository.get_by_id(agreement_id) if agreement_id is not None else None
        if current is None:
            return ConfirmationOutcome.not_found

        self._logger.info(
            "Confirmation lost compare-and-swap",
            extra={"agreement_id": agreement_id, "status": current.status.value},
        )
        if current.status == AppointmentStatus.confirmed:
            return ConfirmationOutcome.already_confirmed
        if current.status == AppointmentStatus.expired:
            return await self._reissue(current)
        if current.status == AppointmentStatus.pending:
            return ConfirmationOutcome.expired_reissued
        return ConfirmationOutcome.cancelled
