from uuid import uuid4

import pytest

from src.guests.dtos import GuestStatus
from src.guests.tests.inmemory_models import InMemoryEmailService, make_event, make_guest
from src.hosts.features.send_reminder.router import get_email_service
from src.hosts.repository import get_host_event_model
from src.hosts.tests.inmemory_models import HOST_ID, VIEWER_ID, InMemoryHostEventModel, access_override, as_user
from src.hosts.urls import SEND_REMINDER_URL
from src.notifications.errors import EmailDeliveryError, EmailNotConfiguredError


def overrides(model: InMemoryHostEventModel, email_service: InMemoryEmailService) -> dict:
    return {
        **access_override(),
        get_host_event_model: lambda: model,
        get_email_service: lambda: email_service,
    }


def setup_guest(**guest_kwargs):
    event = make_event()
    guest = make_guest(event, **guest_kwargs)
    return event, guest, InMemoryHostEventModel(events=[event], guests=[guest])


@pytest.mark.asyncio
async def test_host_reminds_pending_guest(client_factory):
    event, guest, model = setup_guest()
    email_service = InMemoryEmailService()

    async with client_factory(overrides(model, email_service)) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=guest.uuid), headers=as_user(HOST_ID)
        )

    assert response.status_code == 200
    assert response.json() == {"success": True, "email_sent": True}
    assert email_service.sent[0]["kind"] == "reminder"
    assert email_service.sent[0]["to_address"] == "ada@example.com"
    assert model.guests[guest.uuid].reminder_sent_at is not None


@pytest.mark.asyncio
async def test_guest_without_email_opt_in_is_marked_only(client_factory):
    event, guest, model = setup_guest(notify_by_email=False)
    email_service = InMemoryEmailService()

    async with client_factory(overrides(model, email_service)) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=guest.uuid), headers=as_user(HOST_ID)
        )

    assert response.json() == {"success": True, "email_sent": False}
    assert email_service.sent == []


@pytest.mark.asyncio
async def test_responded_guest_is_400(client_factory):
    event, guest, model = setup_guest(status=GuestStatus.ATTENDING)

    async with client_factory(overrides(model, InMemoryEmailService())) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=guest.uuid), headers=as_user(HOST_ID)
        )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ALREADY_RESPONDED"


@pytest.mark.asyncio
async def test_unknown_guest_is_404(client_factory):
    event, _, model = setup_guest()

    async with client_factory(overrides(model, InMemoryEmailService())) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=uuid4()), headers=as_user(HOST_ID)
        )

    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "Guest not found"


@pytest.mark.asyncio
async def test_unconfigured_email_is_503(client_factory):
    event, guest, model = setup_guest()
    email_service = InMemoryEmailService(error=EmailNotConfiguredError())

    async with client_factory(overrides(model, email_service)) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=guest.uuid), headers=as_user(HOST_ID)
        )

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "CHANNEL_NOT_CONFIGURED"
    assert model.guests[guest.uuid].reminder_sent_at is None


@pytest.mark.asyncio
async def test_delivery_failure_is_502(client_factory):
    event, guest, model = setup_guest()
    email_service = InMemoryEmailService(error=EmailDeliveryError("SMTP down"))

    async with client_factory(overrides(model, email_service)) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=guest.uuid), headers=as_user(HOST_ID)
        )

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "PROVIDER_ERROR"


@pytest.mark.asyncio
async def test_viewer_cannot_remind(client_factory):
    event, guest, model = setup_guest()

    async with client_factory(overrides(model, InMemoryEmailService())) as client:
        response = await client.post(
            SEND_REMINDER_URL.format(event_id=event.uuid, guest_id=guest.uuid), headers=as_user(VIEWER_ID)
        )

    assert response.status_code == 403
