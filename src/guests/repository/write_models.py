"""RSVP write model. Returns DTOs, never ORM models."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.config.database import async_session_manager
from src.guests.dtos import (
    DeadlinePassedError,
    EventDTO,
    GuestDTO,
    GuestLimitExceededError,
    GuestNotFoundError,
    GuestStatus,
    RSVPPatchDTO,
    RSVPUpdateResultDTO,
)
from src.guests.repository.orm_models import AdditionalGuest, Guest
from src.guests.repository.read_models import additional_guest_dtos
from src.guests.validation import effective_guest_limit, is_rsvp_allowed, validate_guest_limit


class RSVPWriteModel(ABC):
    @abstractmethod
    async def apply_update(
        self,
        token: str,
        patch: RSVPPatchDTO,
        now: datetime | None = None,
    ) -> RSVPUpdateResultDTO:
        """
        Validate and persist a guest's RSVP change in one transaction.

        Raises GuestNotFoundError, DeadlinePassedError or GuestLimitExceededError
        before anything is written.
        """
        raise NotImplementedError


def check_rsvp_update(
    guest: GuestDTO,
    event: EventDTO,
    patch: RSVPPatchDTO,
    now: datetime,
) -> list[str] | None:
    """Run the deadline and guest-limit gates.

    Returns the cleaned additional guest names when the patch supplies a list,
    None when existing additional guests are kept.
    """
    if not is_rsvp_allowed(event.rsvp_deadline, now):
        raise DeadlinePassedError(event.rsvp_deadline)

    new_additional = patch.cleaned_additional_guests() if patch.is_set("additional_guests") else None
    final_status = patch.status if patch.is_set("status") and patch.status else guest.status

    if GuestStatus(final_status) == GuestStatus.ATTENDING:
        count = len(new_additional) if new_additional is not None else len(guest.additional_guests)
        limit = effective_guest_limit(event.max_guests_per_invitee, guest.max_guests)
        result = validate_guest_limit(limit, count)
        if not result.valid:
            raise GuestLimitExceededError(result.error)

    return new_additional


class SqlRSVPWriteModel(RSVPWriteModel):
    def __init__(self, session_overwrite: AsyncSession | None = None):
        self._session_overwrite = session_overwrite

    async def apply_update(
        self,
        token: str,
        patch: RSVPPatchDTO,
        now: datetime | None = None,
    ) -> RSVPUpdateResultDTO:
        now = now or datetime.now(UTC)
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            stmt = (
                select(Guest)
                .options(selectinload(Guest.event), selectinload(Guest.additional_guests))
                .where(Guest.token == token)
            )
            guest = await session.scalar(stmt)
            if not guest:
                raise GuestNotFoundError(token)

            event = EventDTO.from_event(guest.event)
            previous = GuestDTO.from_guest(guest, additional_guest_dtos(guest))

            new_additional = check_rsvp_update(previous, event, patch, now)

            if new_additional is not None:
                guest.additional_guests = [
                    AdditionalGuest(name=name, position=position)
                    for position, name in enumerate(new_additional)
                ]
            if patch.is_set("name"):
                guest.name = patch.name.strip()
            if patch.is_set("phone"):
                phone = (patch.phone or "").strip() or None
                guest.phone = phone
                guest.notify_by_sms = phone is not None
            if patch.is_set("status") and patch.status:
                guest.status = GuestStatus(patch.status)
            if patch.is_set("dietary_notes"):
                guest.dietary_notes = (patch.dietary_notes or "").strip() or None
            guest.responded_at = now

            await session.flush()

            return RSVPUpdateResultDTO(
                previous=previous,
                guest=GuestDTO.from_guest(guest, additional_guest_dtos(guest)),
                event=event,
            )
