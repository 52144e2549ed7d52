import abc
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import EventDTO, GuestDTO, GuestStatus
from src.guests.repository.orm_models import Event, Guest


class ReminderChannel(str, Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"


@dataclass(frozen=True)
class UpcomingEventDTO:
    event: EventDTO
    pending_guests: list[GuestDTO] = field(default_factory=list)


class ReminderRepository(abc.ABC):
    @abc.abstractmethod
    async def get_upcoming_events(self, start: datetime, end: datetime) -> list[UpcomingEventDTO]:
        """Events dated within [start, end], each with its PENDING guests."""
        raise NotImplementedError

    @abc.abstractmethod
    async def claim_reminder(self, guest_id: UUID, channel: ReminderChannel, now: datetime) -> bool:
        """Set the channel's sent marker if it is still empty.

        Returns False when it was already set, so concurrent runs send once.
        """
        raise NotImplementedError


MARKER_COLUMNS = {
    ReminderChannel.EMAIL: Guest.reminder_sent_at,
    ReminderChannel.SMS: Guest.sms_reminder_sent_at,
}


class SqlReminderRepository(ReminderRepository):
    def __init__(self, session_overwrite: AsyncSession | None = None):
        self._session_overwrite = session_overwrite

    async def get_upcoming_events(self, start: datetime, end: datetime) -> list[UpcomingEventDTO]:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            events_stmt = (
                select(Event).where(Event.date >= start, Event.date <= end).order_by(Event.date)
            )
            events = (await session.execute(events_stmt)).scalars().all()
            if not events:
                return []

            guests_stmt = (
                select(Guest)
                .where(
                    Guest.event_id.in_([event.uuid for event in events]),
                    Guest.status == GuestStatus.PENDING,
                )
                .order_by(Guest.created_at)
            )
            guests = (await session.execute(guests_stmt)).scalars().all()

            by_event: dict[UUID, list[GuestDTO]] = {event.uuid: [] for event in events}
            for guest in guests:
                by_event[guest.event_id].append(GuestDTO.from_guest(guest))

            return [
                UpcomingEventDTO(event=EventDTO.from_event(event), pending_guests=by_event[event.uuid])
                for event in events
            ]

    async def claim_reminder(self, guest_id: UUID, channel: ReminderChannel, now: datetime) -> bool:
        column = MARKER_COLUMNS[ReminderChannel(channel)]
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            result = await session.execute(
                update(Guest)
                .where(Guest.uuid == guest_id, column.is_(None))
                .values({column.key: now})
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1
