from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.guests.dtos import EventDTO, GuestDTO, GuestStatus


class AdditionalGuestResponse(BaseModel):
    uuid: UUID
    name: str


class EventSummaryResponse(BaseModel):
    uuid: UUID
    title: str
    date: datetime
    end_date: datetime | None = None
    location: str | None = None
    description: str | None = None
    rsvp_deadline: datetime | None = None
    max_guests_per_invitee: int | None = None

    @classmethod
    def from_dto(cls, event: EventDTO) -> "EventSummaryResponse":
        return cls(
            uuid=event.uuid,
            title=event.title,
            date=event.date,
            end_date=event.end_date,
            location=event.location,
            description=event.description,
            rsvp_deadline=event.rsvp_deadline,
            max_guests_per_invitee=event.max_guests_per_invitee,
        )


class GuestResponse(BaseModel):
    """Guest as returned to the guest themself. The token is in the URL, so it is left out."""

    uuid: UUID
    email: str
    name: str | None = None
    phone: str | None = None
    status: GuestStatus
    dietary_notes: str | None = None
    max_guests: int | None = None
    notify_by_email: bool
    notify_by_sms: bool
    responded_at: datetime | None = None
    additional_guests: list[AdditionalGuestResponse] = []

    @classmethod
    def from_dto(cls, guest: GuestDTO) -> "GuestResponse":
        return cls(
            uuid=guest.uuid,
            email=guest.email,
            name=guest.name,
            phone=guest.phone,
            status=guest.status,
            dietary_notes=guest.dietary_notes,
            max_guests=guest.max_guests,
            notify_by_email=guest.notify_by_email,
            notify_by_sms=guest.notify_by_sms,
            responded_at=guest.responded_at,
            additional_guests=[
                AdditionalGuestResponse(uuid=additional.uuid, name=additional.name)
                for additional in guest.additional_guests
            ],
        )


class ErrorDetail(BaseModel):
    code: str
    message: str
