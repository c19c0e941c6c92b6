from __future__ import annotations

import logging
from datetime import datetime

import httpx

from salon_scheduler.application.exceptions import EmailDeliveryError
from salon_scheduler.application.ports.email_sender import AppointmentNotice, EmailSenderPort
from salon_scheduler.core.config import settings
from salon_scheduler.infrastructure.email.templates import (
    EmailContent,
    client_notification_email,
    confirmation_link,
    confirmation_link_email,
    final_confirmation_email,
    tech_notification_email,
)


class HttpEmailSender(EmailSenderPort):
    """Sends mail through a transactional email HTTP API (Resend-style JSON payload)."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        from_address: str | None = None,
        from_name: str | None = None,
        salon_name: str | None = None,
        confirm_base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key or settings.EMAIL_API_KEY
        self._api_url = api_url or settings.EMAIL_API_URL
        self._from_address = from_address or settings.EMAIL_FROM_ADDRESS
        self._from_name = from_name or settings.EMAIL_FROM_NAME
        self._salon_name = salon_name or settings.SALON_NAME
        self._confirm_base_url = confirm_base_url or settings.CONFIRM_BASE_URL
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._logger = logging.getLogger(__name__)

        if not self._api_key:
            raise ValueError("EMAIL_API_KEY is required for HttpEmailSender")

    async def _send(self, to: str, content: EmailContent) -> None:
        if not to or not to.strip():
            raise EmailDeliveryError("Recipient address cannot be empty")

        payload = {
            "from": f"{self._from_name} <{self._from_address}>",
            "to": [to],
            "subject": content.subject,
            "text": content.text,
            "html": content.html,
        }
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

        try:
            response = await self._client.post(self._api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("Email delivery failed", extra={"email": to, "error": str(e)})
            raise EmailDeliveryError(f"Failed to send email to {to}") from e

        self._logger.info("Email sent", extra={"email": to, "subject": content.subject})

    async def send_confirmation_link(self, to: str, token: str, appointment_time: datetime) -> None:
        if not token:
            raise EmailDeliveryError("Confirmation token is required for the confirmation link email")
        link = confirmation_link(self._confirm_base_url, token)
        await self._send(to, confirmation_link_email(self._salon_name, link, appointment_time))

    async def send_final_confirmation(self, to: str, appointment_time: datetime) -> None:
        await self._send(to, final_confirmation_email(self._salon_name, appointment_time))

    async def send_tech_notification(self, notice: AppointmentNotice) -> None:
        await self._send(notice.to, tech_notification_email(notice))

    async def send_client_notification(self, notice: AppointmentNotice) -> None:
        await self._send(notice.to, client_notification_email(self._salon_name, notice))

    async def aclose(self) -> None:
        await self._client.aclose()
