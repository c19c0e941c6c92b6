from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from salon_scheduler.application.ports.email_sender import AppointmentNotice, EmailSenderPort


@dataclass(frozen=True)
class SentEmail:
    kind: str
    to: str
    payload: dict[str, Any]


class MockEmailSender(EmailSenderPort):
    def __init__(self) -> None:
        self.sent: list[SentEmail] = []
        self._logger = logging.getLogger(__name__)

    def _record(self, kind: str, to: str, **payload: Any) -> None:
        self.sent.append(SentEmail(kind=kind, to=to, payload=payload))
        self._logger.info("Mock email sent", extra={"email_kind": kind, "email": to})

    def of_kind(self, kind: str) -> list[SentEmail]:
        return [e for e in self.sent if e.kind == kind]

    async def send_confirmation_link(self, to: str, token: str, appointment_time: datetime) -> None:
        self._record("confirmation_link", to, token=token, appointment_time=appointment_time)

    async def send_final_confirmation(self, to: str, appointment_time: datetime) -> None:
        self._record("final_confirmation", to, appointment_time=appointment_time)

    async def send_tech_notification(self, notice: AppointmentNotice) -> None:
        self._record("tech_notification", notice.to, notice=notice)

    async def send_client_notification(self, notice: AppointmentNotice) -> None:
        self._record("client_notification", notice.to, notice=notice)
