import abc
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import CoHostRole, HostRecipientDTO
from src.guests.repository.orm_models import CoHost, Event
from src.models.user import User, UserRole


class EventRole(str, Enum):
    ADMIN = "ADMIN"
    HOST = "HOST"
    COHOST = "COHOST"
    VIEWER = "VIEWER"


MANAGING_ROLES = (EventRole.ADMIN, EventRole.HOST, EventRole.COHOST)


def resolve_event_role(
    is_admin: bool,
    host_id: UUID | None,
    user_id: UUID,
    cohost_role: CoHostRole | None,
) -> EventRole | None:
    """Platform admin beats ownership, ownership beats a co-host row."""
    if is_admin:
        return EventRole.ADMIN
    if host_id is not None and host_id == user_id:
        return EventRole.HOST
    if cohost_role is not None:
        return EventRole.VIEWER if CoHostRole(cohost_role) == CoHostRole.VIEWER else EventRole.COHOST
    return None


def can_manage_role(role: EventRole | None) -> bool:
    return role in MANAGING_ROLES


class EventAccessReadModel(abc.ABC):
    @abc.abstractmethod
    async def role_of(self, user_id: UUID, event_id: UUID) -> EventRole | None:
        raise NotImplementedError

    async def can_manage(self, user_id: UUID, event_id: UUID) -> bool:
        return can_manage_role(await self.role_of(user_id, event_id))

    @abc.abstractmethod
    async def get_hosts_for_notification(self, event_id: UUID) -> list[HostRecipientDTO]:
        """The host and co-hosts (any role) who opted in to RSVP change emails."""
        raise NotImplementedError


class SqlEventAccessReadModel(EventAccessReadModel):
    def __init__(self, session: AsyncSession | None = None):
        self._session = session

    async def role_of(self, user_id: UUID, event_id: UUID) -> EventRole | None:
        async with async_session_manager(session_overwrite=self._session) as session:
            user = await session.get(User, user_id)
            if user is None:
                return None

            host_id = await session.scalar(select(Event.host_id).where(Event.uuid == event_id))
            if host_id is None and user.role != UserRole.ADMIN:
                # unknown event
                return None

            cohost_role = await session.scalar(
                select(CoHost.role).where(CoHost.event_id == event_id, CoHost.user_id == user_id)
            )

            return resolve_event_role(
                is_admin=user.role == UserRole.ADMIN,
                host_id=host_id,
                user_id=user_id,
                cohost_role=cohost_role,
            )

    async def get_hosts_for_notification(self, event_id: UUID) -> list[HostRecipientDTO]:
        async with async_session_manager(session_overwrite=self._session) as session:
            host_stmt = select(User).join(Event, Event.host_id == User.uuid).where(Event.uuid == event_id)
            host = await session.scalar(host_stmt)
            if host is None:
                return []

            cohost_stmt = (
                select(User)
                .join(CoHost, CoHost.user_id == User.uuid)
                .where(CoHost.event_id == event_id)
                .order_by(CoHost.created_at)
            )
            cohosts = (await session.execute(cohost_stmt)).scalars().all()

            return [
                HostRecipientDTO(user_id=user.uuid, email=user.email, name=user.name)
                for user in [host, *cohosts]
                if user.notify_on_rsvp_changes
            ]
