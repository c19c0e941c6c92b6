from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum


class NotificationKind(str, Enum):
    booked = "booked"
    modified = "modified"
    cancelled = "cancelled"


@dataclass(frozen=True)
class AppointmentNotice:
    to: str
    kind: NotificationKind
    date: date
    time: time
    service_name: str
    service_duration: int
    recipient_name: str | None = None
    # only set for "modified"
    old_date: date | None = None
    old_time: time | None = None
    old_service_name: str | None = None
    old_service_duration: int | None = None


class EmailSenderPort(ABC):
    @abstractmethod
    async def send_confirmation_link(self, to: str, token: str, appointment_time: datetime) -> None:
        """Email the link carrying the plaintext token. The token is never stored."""
        raise NotImplementedError

    @abstractmethod
    async def send_final_confirmation(self, to: str, appointment_time: datetime) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send_tech_notification(self, notice: AppointmentNotice) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send_client_notification(self, notice: AppointmentNotice) -> None:
        raise NotImplementedError
