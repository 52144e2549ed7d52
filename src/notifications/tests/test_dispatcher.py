import asyncio
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from src.access.roles import EventAccessReadModel, EventRole
from src.guests.dtos import ChangeType, EventDTO, GuestDTO, GuestStatus, HostRecipientDTO
from src.notifications.dispatcher import HostNotificationDispatcher, HostNotificationJob
from src.notifications.errors import EmailDeliveryError

EVENT = EventDTO(uuid=uuid4(), title="Summer Picnic", date=datetime(2026, 6, 6, 18, 30), host_id=uuid4())
GUEST = GuestDTO(uuid=uuid4(), event_id=EVENT.uuid, email="ada@example.com", token="tok", status=GuestStatus.ATTENDING)


class InMemoryAccessReadModel(EventAccessReadModel):
    def __init__(self, recipients: list[HostRecipientDTO]):
        self.recipients = recipients

    async def role_of(self, user_id: UUID, event_id: UUID) -> EventRole | None:
        return None

    async def get_hosts_for_notification(self, event_id: UUID) -> list[HostRecipientDTO]:
        return self.recipients


class InMemoryEmailService:
    def __init__(self, failing: set[str] | None = None, delay: float = 0):
        self.failing = failing or set()
        self.delay = delay
        self.sent: list[dict] = []

    async def send_rsvp_change_notification(self, **kwargs):
        if self.delay:
            await asyncio.sleep(self.delay)
        if kwargs["to_address"] in self.failing:
            raise EmailDeliveryError("mailbox full", to_address=kwargs["to_address"])
        self.sent.append(kwargs)


def recipients(*emails: str) -> list[HostRecipientDTO]:
    return [HostRecipientDTO(user_id=uuid4(), email=email, name=email.split("@")[0]) for email in emails]


def make_job(change_type: ChangeType = ChangeType.NEW) -> HostNotificationJob:
    return HostNotificationJob(event=EVENT, guest=GUEST, change_type=change_type, event_url="https://rsvp.example.com/e")


@pytest.mark.asyncio
async def test_process_emails_every_recipient_once():
    email_service = InMemoryEmailService()
    dispatcher = HostNotificationDispatcher(
        email_service, InMemoryAccessReadModel(recipients("host@example.com", "cohost@example.com"))
    )

    sent = await dispatcher.process(make_job(ChangeType.STATUS_CHANGED))

    assert sent == 2
    assert [email["to_address"] for email in email_service.sent] == ["host@example.com", "cohost@example.com"]
    assert email_service.sent[0]["change_type"] == ChangeType.STATUS_CHANGED
    assert email_service.sent[0]["host_name"] == "host"


@pytest.mark.asyncio
async def test_one_failing_recipient_does_not_stop_the_others():
    email_service = InMemoryEmailService(failing={"host@example.com"})
    dispatcher = HostNotificationDispatcher(
        email_service, InMemoryAccessReadModel(recipients("host@example.com", "cohost@example.com"))
    )

    sent = await dispatcher.process(make_job())

    assert sent == 1
    assert [email["to_address"] for email in email_service.sent] == ["cohost@example.com"]


@pytest.mark.asyncio
async def test_enqueue_returns_before_delivery_and_workers_drain():
    email_service = InMemoryEmailService(delay=0.01)
    dispatcher = HostNotificationDispatcher(email_service, InMemoryAccessReadModel(recipients("host@example.com")))

    assert dispatcher.enqueue(make_job()) is True
    assert email_service.sent == []

    await dispatcher.join()
    assert len(email_service.sent) == 1
    assert dispatcher.pending == 0

    await dispatcher.stop()


@pytest.mark.asyncio
async def test_full_queue_drops_job():
    email_service = InMemoryEmailService(delay=0.05)
    dispatcher = HostNotificationDispatcher(
        email_service, InMemoryAccessReadModel(recipients("host@example.com")), maxsize=1, workers=1
    )

    results = [dispatcher.enqueue(make_job()) for _ in range(3)]

    assert results[0] is True
    assert results[-1] is False

    await dispatcher.stop()


@pytest.mark.asyncio
async def test_worker_survives_unexpected_error():
    class BrokenAccessReadModel(InMemoryAccessReadModel):
        calls = 0

        async def get_hosts_for_notification(self, event_id):
            BrokenAccessReadModel.calls += 1
            if BrokenAccessReadModel.calls == 1:
                raise RuntimeError("lookup failed")
            return self.recipients

    email_service = InMemoryEmailService()
    dispatcher = HostNotificationDispatcher(
        email_service, BrokenAccessReadModel(recipients("host@example.com")), workers=1
    )

    dispatcher.enqueue(make_job())
    dispatcher.enqueue(make_job())
    await dispatcher.join()

    assert len(email_service.sent) == 1

    await dispatcher.stop()
