"""Rows for SQL model tests, added to the test session and flushed."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from src.guests.dtos import CoHostRole, GuestStatus
from src.guests.repository.orm_models import AdditionalGuest, AppConfig, CoHost, Event, Guest
from src.models.user import User, UserRole


async def create_user(
    session: AsyncSession,
    email: str | None = None,
    name: str | None = "Host",
    role: UserRole = UserRole.USER,
    notify_on_rsvp_changes: bool = True,
) -> User:
    user = User(
        email=email or f"{uuid4().hex[:8]}@example.com",
        name=name,
        role=role,
        notify_on_rsvp_changes=notify_on_rsvp_changes,
    )
    session.add(user)
    await session.flush()
    return user


async def create_event(
    session: AsyncSession,
    host: User,
    title: str = "Summer Picnic",
    date: datetime | None = None,
    **kwargs,
) -> Event:
    event = Event(
        slug=f"event-{uuid4().hex[:8]}",
        title=title,
        date=date or datetime.now(UTC) + timedelta(days=30),
        host_id=host.uuid,
        **kwargs,
    )
    session.add(event)
    await session.flush()
    return event


async def create_guest(
    session: AsyncSession,
    event: Event,
    email: str | None = None,
    status: GuestStatus = GuestStatus.PENDING,
    additional_names: list[str] | None = None,
    **kwargs,
) -> Guest:
    guest = Guest(
        event_id=event.uuid,
        email=email or f"{uuid4().hex[:8]}@example.com",
        status=status,
        **kwargs,
    )
    session.add(guest)
    await session.flush()
    for position, name in enumerate(additional_names or []):
        session.add(AdditionalGuest(guest_id=guest.uuid, name=name, position=position))
    await session.flush()
    return guest


async def add_co_host(
    session: AsyncSession, event: Event, user: User, role: CoHostRole = CoHostRole.COHOST
) -> CoHost:
    co_host = CoHost(event_id=event.uuid, user_id=user.uuid, role=role)
    session.add(co_host)
    await session.flush()
    return co_host


async def add_app_config(session: AsyncSession, category: str, values: dict[str, str]) -> None:
    for key, value in values.items():
        session.add(AppConfig(category=category, key=key, value=value))
    await session.flush()
