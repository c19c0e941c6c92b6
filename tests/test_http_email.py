"""
Tests for the HTTP email adapter against a mocked transport.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time

import httpx
import pytest

from salon_scheduler.application.exceptions import EmailDeliveryError
from salon_scheduler.application.ports.email_sender import AppointmentNotice, NotificationKind
from salon_scheduler.core.config import settings
from salon_scheduler.infrastructure.email.http_email import HttpEmailSender
from salon_scheduler.wiring import dependencies

APPOINTMENT = datetime(2030, 3, 4, 10, 0)


def _sender(handler) -> HttpEmailSender:
    return HttpEmailSender(
        api_key="test-key",
        api_url="https://mail.test/emails",
        from_address="bookings@salon.test",
        from_name="Test Salon",
        salon_name="Test Salon",
        confirm_base_url="https://salon.test/confirm",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_confirmation_link_is_posted():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "msg_1"})

    sender = _sender(handler)
    await sender.send_confirmation_link("anna@example.com", "abc-123_x", APPOINTMENT)
    await sender.aclose()

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == "https://mail.test/emails"
    assert request.headers["Authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["to"] == ["anna@example.com"]
    assert body["from"] == "Test Salon <bookings@salon.test>"
    assert "https://salon.test/confirm?token=abc-123_x" in body["text"]
    assert "Test Salon" in body["subject"]


@pytest.mark.asyncio
async def test_modified_notice_mentions_old_and_new_time():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    notice = AppointmentNotice(
        to="mila@example.com",
        kind=NotificationKind.modified,
        date=date(2030, 3, 4),
        time=time(11, 0),
        service_name="Gel Manicure",
        service_duration=30,
        recipient_name="Mila",
        old_date=date(2030, 3, 4),
        old_time=time(10, 0),
        old_service_name="Gel Manicure",
        old_service_duration=30,
    )

    sender = _sender(handler)
    await sender.send_tech_notification(notice)
    await sender.aclose()

    assert "10:00" in bodies[0]["text"]
    assert "11:00" in bodies[0]["text"]


@pytest.mark.asyncio
async def test_http_failure_raises_delivery_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    sender = _sender(handler)
    with pytest.raises(EmailDeliveryError):
        await sender.send_final_confirmation("anna@example.com", APPOINTMENT)
    await sender.aclose()


@pytest.mark.asyncio
async def test_empty_recipient_is_rejected():
    sender = _sender(lambda request: httpx.Response(200))

    with pytest.raises(EmailDeliveryError):
        await sender.send_final_confirmation("  ", APPOINTMENT)
    await sender.aclose()


def test_api_key_is_required(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_API_KEY", None)

    with pytest.raises(ValueError):
        HttpEmailSender(api_key=None, client=httpx.AsyncClient())


@pytest.fixture
def cached_sender():
    dependencies.get_email_sender.cache_clear()
    yield
    dependencies.get_email_sender.cache_clear()


@pytest.mark.asyncio
async def test_shutdown_closes_the_http_client(monkeypatch, cached_sender):
    monkeypatch.setattr(settings, "EMAIL_API_KEY", "test-key")
    monkeypatch.setattr(settings, "ENV", "production")
    sender = dependencies.get_email_sender()
    assert isinstance(sender, HttpEmailSender)
    assert not sender._client.is_closed

    await dependencies.close_email_sender()

    assert sender._client.is_closed


@pytest.mark.asyncio
async def test_shutdown_without_a_sender_creates_none(cached_sender):
    await dependencies.close_email_sender()

    assert dependencies.get_email_sender.cache_info().currsize == 0
