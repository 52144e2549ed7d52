from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.guests.dtos import GuestStatus
from src.guests.repository.orm_models import Guest
from src.guests.tests.factories import create_event, create_guest, create_user
from src.hosts.repository import SqlHostEventModel


@pytest.mark.asyncio
async def test_update_reminder_schedule(db_session):
    host = await create_user(db_session)
    event = await create_event(db_session, host)
    model = SqlHostEventModel(session_overwrite=db_session)

    updated = await model.update_reminder_schedule(event.uuid, '[{"type": "day", "value": 3}]')

    assert updated.reminder_schedule == '[{"type": "day", "value": 3}]'
    assert (await model.get_event(event.uuid)).reminder_schedule == updated.reminder_schedule
    assert await model.update_reminder_schedule(uuid4(), None) is None


@pytest.mark.asyncio
async def test_guests_are_scoped_to_their_event(db_session):
    host = await create_user(db_session)
    event = await create_event(db_session, host)
    other = await create_event(db_session, host)
    guest = await create_guest(db_session, event, status=GuestStatus.MAYBE)
    await create_guest(db_session, event, status=GuestStatus.ATTENDING)
    await create_guest(db_session, other)
    model = SqlHostEventModel(session_overwrite=db_session)

    assert (await model.get_guest(event.uuid, guest.uuid)).email == guest.email
    assert await model.get_guest(other.uuid, guest.uuid) is None
    assert len(await model.list_guests(event.uuid)) == 2
    assert [g.uuid for g in await model.list_guests(event.uuid, GuestStatus.MAYBE)] == [guest.uuid]


@pytest.mark.asyncio
async def test_mark_reminder_sent(db_session):
    host = await create_user(db_session)
    event = await create_event(db_session, host)
    guest = await create_guest(db_session, event)
    model = SqlHostEventModel(session_overwrite=db_session)
    now = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)

    await model.mark_reminder_sent(guest.uuid, now)

    stored = await db_session.get(Guest, guest.uuid)
    assert stored.reminder_sent_at == now


@pytest.mark.asyncio
async def test_get_host_name(db_session):
    host = await create_user(db_session, name="Grace")
    event = await create_event(db_session, host)
    model = SqlHostEventModel(session_overwrite=db_session)

    assert await model.get_host_name(event.uuid) == "Grace"
    assert await model.get_host_name(uuid4()) is None
