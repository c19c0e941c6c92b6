from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable

from salon_scheduler.application.scheduling.overlap import interval_on, overlaps
from salon_scheduler.domain.entities.agreement import Agreement


@dataclass(frozen=True)
class ConflictInfo:
    agreement_id: int | None
    start_time: time
    client_name: str
    service_name: str


def find_conflicts(
    candidate_date: date,
    candidate_start: time,
    candidate_duration: int,
    existing_agreements: Iterable[Agreement],
    exclude_agreement_id: int | None = None,
) -> list[ConflictInfo]:
    """
    Describe every active agreement that the candidate slot would overlap.

    Expired and cancelled agreements never conflict. The agreement being
    edited is skipped via exclude_agreement_id.
    """
    cand_start, cand_end = interval_on(candidate_date, candidate_start, candidate_duration)
    conflicts: list[ConflictInfo] = []

    for agreement in existing_agreements:
        if not agreement.is_active:
            continue
        if exclude_agreement_id is not None and agreement.id == exclude_agreement_id:
            continue
        if agreement.date != candidate_date:
            continue
        if overlaps(cand_start, cand_end, agreement.starts_at, agreement.ends_at):
            conflicts.append(
                ConflictInfo(
                    agreement_id=agreement.id,
                    start_time=agreement.start_time,
                    client_name=agreement.client.name,
                    service_name=agreement.service.name,
                )
            )

    conflicts.sort(key=lambda c: c.start_time)
    return conflicts
