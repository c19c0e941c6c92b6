from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Technician:
    id: int
    name: str
    email: str
    notify_by_email: bool = True  # opt-in for booked/modified/cancelled notices
    service_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class Client:
    id: int
    name: str
    email: str
