"""
Input validators for the wire formats: YYYY-MM-DD dates, HH:mm times and
English day names. Each raises ValidationError before any state changes.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from salon_scheduler.application.exceptions import ValidationError
from salon_scheduler.domain.entities.schedule import WEEKDAY_NAMES

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")


def parse_date(value: str | None, field_name: str = "date") -> date:
    if not value:
        raise ValidationError(f"{field_name} is required")
    value = str(value).strip()
    if not DATE_PATTERN.match(value):
        raise ValidationError(f"Invalid {field_name} format. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}")


def parse_optional_date(value: str | None, field_name: str = "date") -> date | None:
    if value is None or not str(value).strip():
        return None
    return parse_date(value, field_name)


def parse_time(value: str | None, field_name: str = "time") -> time:
    """Accepts HH:mm, and HH:mm:ss as sent by the booking form."""
    if not value:
        raise ValidationError(f"{field_name} is required")
    value = str(value).strip()
    if not TIME_PATTERN.match(value):
        raise ValidationError(f"Invalid {field_name} format. Use HH:mm")
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    try:
        return datetime.strptime(value, fmt).time()
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}")


def parse_day_of_week(value: str | None) -> int:
    if not value:
        raise ValidationError("Day of week is required")
    normalized = str(value).strip().capitalize()
    if normalized not in WEEKDAY_NAMES:
        raise ValidationError(f"Invalid day of week: {value}")
    return WEEKDAY_NAMES.index(normalized)


def validate_time_range(begin: time, end: time, day_name: str) -> None:
    if begin >= end:
        raise ValidationError(f"Begin time must be before end time for {day_name}.")


def validate_email(value: str | None) -> str:
    if not value:
        raise ValidationError("Email is required")
    trimmed = value.strip()
    if trimmed.endswith(".") or not EMAIL_PATTERN.match(trimmed):
        raise ValidationError(f"Email {value} is not a valid email.")
    return trimmed


def validate_name(value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError("Name is not a valid name.")
    return value.strip()


def format_time(value: time) -> str:
    return value.strftime("%H:%M")
