"""
Interval overlap detection.

Every overlap decision in the package goes through `overlaps` so slot
filtering and conflict checks share the same boundary semantics.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any


def overlaps(start_a: Any, end_a: Any, start_b: Any, end_b: Any) -> bool:
    """
    Half-open interval test: [start_a, end_a) intersects [start_b, end_b).

    An interval ending exactly when the other begins is not an overlap.
    Accepts any mutually comparable points (time or datetime).
    """
    return start_a < end_b and end_a > start_b


def interval_on(target_date: date, start: time, duration_minutes: int) -> tuple[datetime, datetime]:
    """Anchor a time-of-day on a date so that end arithmetic never wraps past midnight."""
    start_dt = datetime.combine(target_date, start)
    return start_dt, start_dt + timedelta(minutes=duration_minutes)
