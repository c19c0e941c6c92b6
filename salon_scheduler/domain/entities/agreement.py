from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum

from salon_scheduler.application.exceptions import InvalidStateError
from salon_scheduler.domain.entities.account import Client, Technician
from salon_scheduler.domain.entities.service import Service

CONFIRMATION_HOLD_MINUTES = 30
TOKEN_BYTES = 32


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    expired = "expired"
    cancelled = "cancelled"


ACTIVE_STATUSES = frozenset({AppointmentStatus.pending, AppointmentStatus.confirmed})


def generate_confirmation_token(byte_length: int = TOKEN_BYTES) -> str:
    """URL-safe base64 of random bytes, without padding."""
    raw = secrets.token_bytes(byte_length)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def hash_token(token: str) -> str:
    """Uppercase hex SHA-256 of the UTF-8 token. Only this digest is ever stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest().upper()


@dataclass
class Agreement:
    """
    A booked appointment and its confirmation lifecycle.

    Transitions are pure: they mutate this instance and the caller persists
    it. Instances are rebuilt per request from the repository, never shared.
    """

    date: date
    start_time: time
    service: Service
    technician: Technician
    client: Client
    salon_id: int
    id: int | None = None
    status: AppointmentStatus = AppointmentStatus.pending
    confirm_token_hash: str | None = None
    expire_at: datetime | None = None
    confirmed_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def technician_id(self) -> int:
        return self.technician.id

    @property
    def client_id(self) -> int:
        return self.client.id

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.service.duration_minutes)

    @property
    def end_time(self) -> time:
        return self.ends_at.time()

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def mark_pending(self, now: datetime | None = None, hold_minutes: int = CONFIRMATION_HOLD_MINUTES) -> str:
        # always a fresh token: the previous hash is overwritten and stops resolving
        now = now or datetime.now(UTC)
        token = generate_confirmation_token()
        self.status = AppointmentStatus.pending
        self.confirm_token_hash = hash_token(token)
        self.expire_at = now + timedelta(minutes=hold_minutes)
        return token

    def confirm(self, now: datetime | None = None) -> None:
        if self.status != AppointmentStatus.pending:
            raise InvalidStateError(
                f"Only pending agreements can be confirmed (agreement {self.id} is {self.status.value})."
            )
        self.status = AppointmentStatus.confirmed
        self.confirmed_at = now or datetime.now(UTC)
        self.expire_at = None
        # confirm_token_hash stays so the confirmation link keeps resolving

    def expire(self, now: datetime | None = None) -> bool:
        """Pending -> expired once the hold has lapsed. Returns False (no-op) otherwise."""
        now = now or datetime.now(UTC)
        if self.status != AppointmentStatus.pending:
            return False
        if self.expire_at is None or not now > self.expire_at:
            return False
        self.status = AppointmentStatus.expired
        return True

    def cancel(self) -> bool:
        if self.status == AppointmentStatus.cancelled:
            return False
        self.status = AppointmentStatus.cancelled
        self.expire_at = None
        return True
