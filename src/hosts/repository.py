"""Host-side reads and writes on an event and its guests."""

import abc
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import EventDTO, GuestDTO, GuestStatus
from src.guests.repository.orm_models import Event, Guest
from src.models.user import User


class HostEventModel(abc.ABC):
    @abc.abstractmethod
    async def get_event(self, event_id: UUID) -> EventDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def update_reminder_schedule(self, event_id: UUID, reminder_schedule: str | None) -> EventDTO | None:
        """Store an encoded schedule. Returns None for an unknown event."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_host_name(self, event_id: UUID) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_guest(self, event_id: UUID, guest_id: UUID) -> GuestDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_guests(self, event_id: UUID, status: GuestStatus | None = None) -> list[GuestDTO]:
        raise NotImplementedError

    @abc.abstractmethod
    async def mark_reminder_sent(self, guest_id: UUID, now: datetime) -> None:
        raise NotImplementedError


class SqlHostEventModel(HostEventModel):
    def __init__(self, session_overwrite: AsyncSession | None = None):
        self._session_overwrite = session_overwrite

    async def get_event(self, event_id: UUID) -> EventDTO | None:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            event = await session.get(Event, event_id)
            return EventDTO.from_event(event) if event else None

    async def update_reminder_schedule(self, event_id: UUID, reminder_schedule: str | None) -> EventDTO | None:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            event = await session.get(Event, event_id)
            if not event:
                return None
            event.reminder_schedule = reminder_schedule
            await session.flush()
            return EventDTO.from_event(event)

    async def get_host_name(self, event_id: UUID) -> str | None:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            return await session.scalar(
                select(User.name).join(Event, Event.host_id == User.uuid).where(Event.uuid == event_id)
            )

    async def get_guest(self, event_id: UUID, guest_id: UUID) -> GuestDTO | None:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            guest = await session.scalar(
                select(Guest).where(Guest.uuid == guest_id, Guest.event_id == event_id)
            )
            return GuestDTO.from_guest(guest) if guest else None

    async def list_guests(self, event_id: UUID, status: GuestStatus | None = None) -> list[GuestDTO]:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            stmt = select(Guest).where(Guest.event_id == event_id).order_by(Guest.created_at)
            if status is not None:
                stmt = stmt.where(Guest.status == status)
            guests = (await session.execute(stmt)).scalars().all()
            return [GuestDTO.from_guest(guest) for guest in guests]

    async def mark_reminder_sent(self, guest_id: UUID, now: datetime) -> None:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            guest = await session.get(Guest, guest_id)
            if guest:
                guest.reminder_sent_at = now


def get_host_event_model() -> HostEventModel:
    return SqlHostEventModel()
