from datetime import UTC, datetime, timedelta

import pytest

from src.guests.dtos import GuestStatus
from src.guests.tests.factories import create_event, create_guest, create_user
from src.reminders.repository import ReminderChannel, SqlReminderRepository

NOW = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_upcoming_events_carry_pending_guests_only(db_session):
    host = await create_user(db_session)
    soon = await create_event(db_session, host, title="Soon", date=NOW + timedelta(days=2))
    await create_event(db_session, host, title="Far", date=NOW + timedelta(days=40))
    await create_event(db_session, host, title="Past", date=NOW - timedelta(days=1))
    await create_guest(db_session, soon, email="pending@example.com")
    await create_guest(db_session, soon, email="yes@example.com", status=GuestStatus.ATTENDING)
    repository = SqlReminderRepository(session_overwrite=db_session)

    upcoming = await repository.get_upcoming_events(NOW, NOW + timedelta(days=14))

    assert [item.event.title for item in upcoming] == ["Soon"]
    assert [guest.email for guest in upcoming[0].pending_guests] == ["pending@example.com"]


@pytest.mark.asyncio
async def test_no_upcoming_events(db_session):
    repository = SqlReminderRepository(session_overwrite=db_session)

    assert await repository.get_upcoming_events(NOW, NOW + timedelta(days=14)) == []


@pytest.mark.asyncio
async def test_claim_reminder_succeeds_once_per_channel(db_session):
    host = await create_user(db_session)
    event = await create_event(db_session, host, date=NOW + timedelta(days=2))
    guest = await create_guest(db_session, event)
    repository = SqlReminderRepository(session_overwrite=db_session)

    assert await repository.claim_reminder(guest.uuid, ReminderChannel.EMAIL, NOW) is True
    assert await repository.claim_reminder(guest.uuid, ReminderChannel.EMAIL, NOW) is False
    assert await repository.claim_reminder(guest.uuid, ReminderChannel.SMS, NOW) is True

    await db_session.refresh(guest)
    assert guest.reminder_sent_at is not None
    assert guest.sms_reminder_sent_at is not None
