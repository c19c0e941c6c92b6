from __future__ import annotations

import logging

from salon_scheduler.application.ports.email_sender import (
    AppointmentNotice,
    EmailSenderPort,
    NotificationKind,
)
from salon_scheduler.domain.entities.agreement import Agreement


class AppointmentNotifier:
    """
    Wraps the email sender so delivery problems never undo a state change.

    Every method returns True when the message was handed off and False when
    sending failed; failures are logged, not raised.
    """

    def __init__(self, email_sender: EmailSenderPort) -> None:
        self._email_sender = email_sender
        self._logger = logging.getLogger(__name__)

    async def confirmation_link(self, agreement: Agreement, token: str) -> bool:
        try:
            await self._email_sender.send_confirmation_link(agreement.client.email, token, agreement.starts_at)
        except Exception as e:
            self._logger.exception(
                "Failed to send confirmation link",
                extra={"agreement_id": agreement.id, "email": agreement.client.email, "error": str(e)},
            )
            return False
        self._logger.info("Confirmation link sent", extra={"agreement_id": agreement.id, "email": agreement.client.email})
        return True

    async def final_confirmation(self, agreement: Agreement) -> bool:
        try:
            await self._email_sender.send_final_confirmation(agreement.client.email, agreement.starts_at)
        except Exception as e:
            self._logger.exception(
                "Failed to send final confirmation",
                extra={"agreement_id": agreement.id, "email": agreement.client.email, "error": str(e)},
            )
            return False
        return True

    async def technician(
        self,
        agreement: Agreement,
        kind: NotificationKind,
        previous: Agreement | None = None,
    ) -> bool:
        tech = agreement.technician
        if not tech.notify_by_email:
            return False
        try:
            await self._email_sender.send_tech_notification(_notice(agreement, kind, tech.email, tech.name, previous))
        except Exception as e:
            self._logger.exception(
                "Failed to send technician notification",
                extra={"agreement_id": agreement.id, "technician_id": tech.id, "error": str(e)},
            )
            return False
        self._logger.info("Tech notification sent", extra={"agreement_id": agreement.id, "technician_id": tech.id})
        return True

    async def client(
        self,
        agreement: Agreement,
        kind: NotificationKind,
        previous: Agreement | None = None,
    ) -> bool:
        client = agreement.client
        try:
            await self._email_sender.send_client_notification(
                _notice(agreement, kind, client.email, client.name, previous)
            )
        except Exception as e:
            self._logger.exception(
                "Failed to send client notification",
                extra={"agreement_id": agreement.id, "email": client.email, "error": str(e)},
            )
            return False
        return True


def _notice(
    agreement: Agreement,
    kind: NotificationKind,
    to: str,
    recipient_name: str,
    previous: Agreement | None,
) -> AppointmentNotice:
    old = previous if kind == NotificationKind.modified else None
    return AppointmentNotice(
        to=to,
        kind=kind,
        date=agreement.date,
        time=agreement.start_time,
        service_name=agreement.service.name,
        service_duration=agreement.service.duration_minutes,
        recipient_name=recipient_name,
        old_date=old.date if old else None,
        old_time=old.start_time if old else None,
        old_service_name=old.service.name if old else None,
        old_service_duration=old.service.duration_minutes if old else None,
    )
