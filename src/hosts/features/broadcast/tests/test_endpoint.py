import pytest

from src.guests.dtos import GuestStatus
from src.guests.tests.inmemory_models import InMemoryEmailService, InMemorySmsService, make_event, make_guest
from src.hosts.features.broadcast.router import get_broadcast_channels
from src.hosts.repository import get_host_event_model
from src.hosts.tests.inmemory_models import HOST_ID, VIEWER_ID, InMemoryHostEventModel, access_override, as_user
from src.hosts.urls import BROADCAST_URL
from src.notifications.errors import EmailDeliveryError


class PartlyFailingEmailService(InMemoryEmailService):
    def __init__(self, failing: str):
        super().__init__()
        self.failing = failing

    async def send_broadcast(self, **kwargs) -> None:
        if kwargs["to_address"] == self.failing:
            raise EmailDeliveryError("mailbox full", to_address=self.failing)
        await super().send_broadcast(**kwargs)


def build(email_service=None, sms_service=None):
    event = make_event()
    guests = [
        make_guest(event, token="t1", email="ada@example.com", status=GuestStatus.ATTENDING),
        make_guest(
            event,
            token="t2",
            email="bob@example.com",
            status=GuestStatus.MAYBE,
            phone="+15551234567",
            notify_by_sms=True,
        ),
        make_guest(event, token="t3", email="cy@example.com", status=GuestStatus.PENDING, notify_by_email=False),
    ]
    model = InMemoryHostEventModel(events=[event], guests=guests)
    email_service = email_service or InMemoryEmailService()
    sms_service = sms_service or InMemorySmsService()
    overrides = {
        **access_override(),
        get_host_event_model: lambda: model,
        get_broadcast_channels: lambda: (email_service, sms_service),
    }
    return event, overrides, email_service, sms_service


@pytest.mark.asyncio
async def test_broadcast_by_email_to_everyone(client_factory):
    event, overrides, email_service, sms_service = build()

    async with client_factory(overrides) as client:
        response = await client.post(
            BROADCAST_URL.format(event_id=event.uuid),
            json={"subject": "Parking", "message": "Use the north lot", "sendVia": "EMAIL"},
            headers=as_user(HOST_ID),
        )

    assert response.status_code == 200
    assert response.json() == {"success": True, "sent_to": 2, "errors": []}
    assert sorted(email["to_address"] for email in email_service.sent) == ["ada@example.com", "bob@example.com"]
    assert sms_service.sent == []


@pytest.mark.asyncio
async def test_broadcast_both_channels_with_status_filter(client_factory):
    event, overrides, email_service, sms_service = build()

    async with client_factory(overrides) as client:
        response = await client.post(
            BROADCAST_URL.format(event_id=event.uuid),
            json={"subject": "Parking", "message": "North lot", "send_via": "BOTH", "filter_status": "MAYBE"},
            headers=as_user(HOST_ID),
        )

    assert response.json()["sent_to"] == 1
    assert [email["to_address"] for email in email_service.sent] == ["bob@example.com"]
    assert sms_service.sent[0]["to"] == "+15551234567"
    assert sms_service.sent[0]["message"] == "North lot"


@pytest.mark.asyncio
async def test_broadcast_reports_failed_guests(client_factory):
    event, overrides, _, _ = build(email_service=PartlyFailingEmailService("ada@example.com"))

    async with client_factory(overrides) as client:
        response = await client.post(
            BROADCAST_URL.format(event_id=event.uuid),
            json={"subject": "Parking", "message": "North lot", "sendVia": "EMAIL"},
            headers=as_user(HOST_ID),
        )

    assert response.json() == {"success": True, "sent_to": 1, "errors": ["ada@example.com"]}


@pytest.mark.asyncio
async def test_failed_email_does_not_skip_sms_to_same_guest(client_factory):
    event, overrides, _, sms_service = build(email_service=PartlyFailingEmailService("bob@example.com"))

    async with client_factory(overrides) as client:
        response = await client.post(
            BROADCAST_URL.format(event_id=event.uuid),
            json={"subject": "Parking", "message": "North lot", "sendVia": "BOTH"},
            headers=as_user(HOST_ID),
        )

    assert response.json() == {"success": True, "sent_to": 1, "errors": ["bob@example.com"]}
    assert [sms["to"] for sms in sms_service.sent] == ["+15551234567"]


@pytest.mark.asyncio
async def test_unexpected_error_for_one_guest_does_not_abort_broadcast(client_factory):
    class CrashingEmailService(InMemoryEmailService):
        async def send_broadcast(self, **kwargs) -> None:
            if kwargs["to_address"] == "ada@example.com":
                raise RuntimeError("template blew up")
            await super().send_broadcast(**kwargs)

    event, overrides, email_service, _ = build(email_service=CrashingEmailService())

    async with client_factory(overrides) as client:
        response = await client.post(
            BROADCAST_URL.format(event_id=event.uuid),
            json={"subject": "Parking", "message": "North lot", "sendVia": "EMAIL"},
            headers=as_user(HOST_ID),
        )

    assert response.status_code == 200
    assert response.json() == {"success": True, "sent_to": 1, "errors": ["ada@example.com"]}
    assert [email["to_address"] for email in email_service.sent] == ["bob@example.com"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"subject": "", "message": "x", "sendVia": "EMAIL"},
        {"subject": "Hi", "message": "x", "sendVia": "PIGEON"},
        {"subject": "Hi", "message": "x", "sendVia": "EMAIL", "filterStatus": "LATE"},
    ],
)
async def test_broadcast_invalid_body(client_factory, body):
    event, overrides, _, _ = build()

    async with client_factory(overrides) as client:
        response = await client.post(BROADCAST_URL.format(event_id=event.uuid), json=body, headers=as_user(HOST_ID))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_viewer_cannot_broadcast(client_factory):
    event, overrides, email_service, _ = build()

    async with client_factory(overrides) as client:
        response = await client.post(
            BROADCAST_URL.format(event_id=event.uuid),
            json={"subject": "Hi", "message": "x", "sendVia": "EMAIL"},
            headers=as_user(VIEWER_ID),
        )

    assert response.status_code == 403
    assert email_service.sent == []
