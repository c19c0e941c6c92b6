from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlencode

from salon_scheduler.application.ports.email_sender import AppointmentNotice, NotificationKind


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


TECH_HEADLINES = {
    NotificationKind.booked: ("New appointment scheduled", "A new appointment has been added to your schedule."),
    NotificationKind.modified: ("Appointment updated", "An appointment on your schedule has been updated."),
    NotificationKind.cancelled: ("Appointment cancelled", "An appointment on your schedule has been cancelled."),
}

CLIENT_HEADLINES = {
    NotificationKind.booked: ("Your appointment is confirmed", "your appointment has been confirmed."),
    NotificationKind.modified: ("Your appointment has been updated", "your appointment has been updated."),
    NotificationKind.cancelled: ("Your appointment has been cancelled", "your appointment has been cancelled."),
}


def confirmation_link(base_url: str, token: str) -> str:
    return f"{base_url}?{urlencode({'token': token})}"


def _when(value: datetime) -> str:
    return value.strftime("%A %d %B %Y at %H:%M")


def confirmation_link_email(salon_name: str, link: str, appointment_time: datetime) -> EmailContent:
    text = (
        f"Thanks for booking with {salon_name}!\n\n"
        f"Please confirm your appointment on {_when(appointment_time)} by opening this link:\n"
        f"{link}\n\n"
        "The link holds your slot for a limited time."
    )
    html = (
        f"<p>Thanks for booking with {salon_name}!</p>"
        f"<p>Please confirm your appointment on <strong>{_when(appointment_time)}</strong>.</p>"
        f'<p><a href="{link}">Confirm Appointment</a></p>'
    )
    return EmailContent(subject=f"Appointment Confirmation at {salon_name}", text=text, html=html)


def final_confirmation_email(salon_name: str, appointment_time: datetime) -> EmailContent:
    text = f"Your appointment at {salon_name} on {_when(appointment_time)} is confirmed. See you soon!"
    html = f"<p>Your appointment at {salon_name} on <strong>{_when(appointment_time)}</strong> is confirmed.</p>"
    return EmailContent(subject=f"Appointment Confirmed at {salon_name}", text=text, html=html)


def _details(notice: AppointmentNotice) -> list[str]:
    lines = [
        f"Date: {notice.date.isoformat()}",
        f"Time: {notice.time.strftime('%H:%M')}",
        f"Service: {notice.service_name} ({notice.service_duration} min)",
    ]
    if notice.kind == NotificationKind.modified and notice.old_date is not None:
        old_time = notice.old_time.strftime("%H:%M") if notice.old_time else "?"
        lines.append(
            f"Previously: {notice.old_date.isoformat()} {old_time}, "
            f"{notice.old_service_name} ({notice.old_service_duration} min)"
        )
    return lines


def tech_notification_email(notice: AppointmentNotice) -> EmailContent:
    subject, intro = TECH_HEADLINES[notice.kind]
    lines = _details(notice)
    text = intro + "\n\n" + "\n".join(lines)
    html = f"<h2>{subject}</h2><p>{intro}</p><ul>" + "".join(f"<li>{line}</li>" for line in lines) + "</ul>"
    return EmailContent(subject=subject, text=text, html=html)


def client_notification_email(salon_name: str, notice: AppointmentNotice) -> EmailContent:
    subject, tail = CLIENT_HEADLINES[notice.kind]
    intro = f"Hi {notice.recipient_name or 'there'}, {tail}"
    lines = _details(notice)
    text = intro + "\n\n" + "\n".join(lines)
    html = f"<p>{intro}</p><ul>" + "".join(f"<li>{line}</li>" for line in lines) + "</ul>"
    return EmailContent(subject=f"{subject} - {salon_name}", text=text, html=html)
