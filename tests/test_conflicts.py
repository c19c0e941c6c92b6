"""
Tests for describing appointments a candidate slot would collide with.
"""

from __future__ import annotations

from datetime import date, time

from conftest import MANICURE, MONDAY, PEDICURE, make_agreement
from salon_scheduler.application.scheduling.conflicts import find_conflicts
from salon_scheduler.domain.entities.agreement import AppointmentStatus


def test_reports_overlapping_appointments_sorted_by_start():
    existing = [
        make_agreement(time(11, 0), service=PEDICURE, agreement_id=2),
        make_agreement(time(10, 0), agreement_id=1),
    ]

    conflicts = find_conflicts(MONDAY, time(10, 15), 60, existing)

    assert [c.agreement_id for c in conflicts] == [1, 2]
    assert conflicts[0].start_time == time(10, 0)
    assert conflicts[0].client_name == "Anna"
    assert conflicts[0].service_name == MANICURE.name


def test_adjacent_appointment_is_not_a_conflict():
    existing = [make_agreement(time(10, 0), agreement_id=1)]

    assert find_conflicts(MONDAY, time(10, 30), 30, existing) == []
    assert find_conflicts(MONDAY, time(9, 30), 30, existing) == []


def test_inactive_appointments_never_conflict():
    existing = [
        make_agreement(time(10, 0), status=AppointmentStatus.expired, agreement_id=1),
        make_agreement(time(10, 0), status=AppointmentStatus.cancelled, agreement_id=2),
    ]

    assert find_conflicts(MONDAY, time(10, 0), 30, existing) == []


def test_excluded_appointment_is_skipped():
    """Moving an appointment by a few minutes must not collide with itself."""
    existing = [make_agreement(time(10, 0), agreement_id=7)]

    assert find_conflicts(MONDAY, time(10, 10), 30, existing, exclude_agreement_id=7) == []


def test_other_dates_are_ignored():
    existing = [make_agreement(time(10, 0), on=date(2030, 3, 5), agreement_id=1)]

    assert find_conflicts(MONDAY, time(10, 0), 30, existing) == []
