import abc
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.config.database import async_session_manager
from src.guests.dtos import AdditionalGuestDTO, EventDTO, GuestDTO, RSVPInfoDTO
from src.guests.repository.orm_models import Guest
from src.guests.validation import is_rsvp_allowed


def additional_guest_dtos(guest: Guest) -> list[AdditionalGuestDTO]:
    return [
        AdditionalGuestDTO(uuid=additional.uuid, name=additional.name)
        for additional in guest.additional_guests
    ]


class RSVPReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_rsvp_info(self, token: str, now: datetime | None = None) -> RSVPInfoDTO | None:
        """
        Get the guest behind an RSVP token, with its event and additional guests.
        Returns None for an unknown token.
        """
        raise NotImplementedError


class SqlRSVPReadModel(RSVPReadModel):
    def __init__(self, session_overwrite: AsyncSession | None = None):
        self._session_overwrite = session_overwrite

    async def get_rsvp_info(self, token: str, now: datetime | None = None) -> RSVPInfoDTO | None:
        now = now or datetime.now(UTC)
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            stmt = (
                select(Guest)
                .options(selectinload(Guest.event), selectinload(Guest.additional_guests))
                .where(Guest.token == token)
            )
            guest = await session.scalar(stmt)

            if not guest:
                return None

            return RSVPInfoDTO(
                guest=GuestDTO.from_guest(guest, additional_guest_dtos(guest)),
                event=EventDTO.from_event(guest.event),
                deadline_passed=not is_rsvp_allowed(guest.event.rsvp_deadline, now),
            )
