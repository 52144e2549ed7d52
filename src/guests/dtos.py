from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from src.guests.repository.orm_models import Event, Guest


class RSVPError(Exception):
    """Base class for errors that reject an RSVP update before anything is written."""

    code = "RSVP_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class GuestNotFoundError(RSVPError):
    code = "NOT_FOUND"

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__("RSVP not found")


class DeadlinePassedError(RSVPError):
    code = "DEADLINE_PASSED"

    def __init__(self, deadline: datetime) -> None:
        self.deadline = deadline
        super().__init__("The RSVP deadline for this event has passed")


class GuestLimitExceededError(RSVPError):
    code = "LIMIT_EXCEEDED"


class RSVPValidationError(RSVPError):
    code = "VALIDATION_ERROR"


class GuestStatus(str, Enum):
    PENDING = "PENDING"
    ATTENDING = "ATTENDING"
    NOT_ATTENDING = "NOT_ATTENDING"
    MAYBE = "MAYBE"


class ChangeType(str, Enum):
    NEW = "NEW"
    UPDATED = "UPDATED"
    STATUS_CHANGED = "STATUS_CHANGED"


class CoHostRole(str, Enum):
    COHOST = "COHOST"
    VIEWER = "VIEWER"


class _Unset:
    """Marks a patch field the caller did not send."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class AdditionalGuestDTO:
    uuid: UUID
    name: str


@dataclass(frozen=True)
class EventDTO:
    uuid: UUID
    title: str
    date: datetime
    host_id: UUID
    slug: str | None = None
    location: str | None = None
    description: str | None = None
    end_date: datetime | None = None
    rsvp_deadline: datetime | None = None
    max_guests_per_invitee: int | None = None
    reminder_schedule: str | None = None
    reply_to: str | None = None

    @classmethod
    def from_event(cls, event: "Event") -> "EventDTO":
        return cls(
            uuid=event.uuid,
            title=event.title,
            date=event.date,
            host_id=event.host_id,
            slug=event.slug,
            location=event.location,
            description=event.description,
            end_date=event.end_date,
            rsvp_deadline=event.rsvp_deadline,
            max_guests_per_invitee=event.max_guests_per_invitee,
            reminder_schedule=event.reminder_schedule,
            reply_to=event.reply_to,
        )


@dataclass(frozen=True)
class GuestDTO:
    uuid: UUID
    event_id: UUID
    email: str
    token: str
    status: GuestStatus = GuestStatus.PENDING
    name: str | None = None
    phone: str | None = None
    dietary_notes: str | None = None
    max_guests: int | None = None
    notify_by_email: bool = True
    notify_by_sms: bool = False
    responded_at: datetime | None = None
    reminder_sent_at: datetime | None = None
    sms_reminder_sent_at: datetime | None = None
    additional_guests: list[AdditionalGuestDTO] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @classmethod
    def from_guest(
        cls, guest: "Guest", additional_guests: list[AdditionalGuestDTO] | None = None
    ) -> "GuestDTO":
        return cls(
            uuid=guest.uuid,
            event_id=guest.event_id,
            email=guest.email,
            token=guest.token,
            status=GuestStatus(guest.status),
            name=guest.name,
            phone=guest.phone,
            dietary_notes=guest.dietary_notes,
            max_guests=guest.max_guests,
            notify_by_email=guest.notify_by_email,
            notify_by_sms=guest.notify_by_sms,
            responded_at=guest.responded_at,
            reminder_sent_at=guest.reminder_sent_at,
            sms_reminder_sent_at=guest.sms_reminder_sent_at,
            additional_guests=additional_guests or [],
        )


@dataclass(frozen=True)
class RSVPInfoDTO:
    """Guest as shown on the RSVP page, with the event it belongs to."""

    guest: GuestDTO
    event: EventDTO
    deadline_passed: bool


@dataclass(frozen=True)
class RSVPPatchDTO:
    """Partial RSVP update. Fields left as UNSET are not touched."""

    name: str | None = UNSET
    phone: str | None = UNSET
    status: GuestStatus | None = UNSET
    additional_guests: list[str] | None = UNSET
    dietary_notes: str | None = UNSET

    def __post_init__(self) -> None:
        if self.is_set("name") and (self.name is None or not self.name.strip()):
            raise RSVPValidationError("Name is required")
        if self.is_set("status") and self.status is not None:
            if GuestStatus(self.status) == GuestStatus.PENDING:
                raise RSVPValidationError("Status must be ATTENDING, NOT_ATTENDING or MAYBE")
        if self.is_set("additional_guests") and self.additional_guests is not None:
            if not all(isinstance(name, str) for name in self.additional_guests):
                raise RSVPValidationError("Additional guest names must be strings")

    def is_set(self, field_name: str) -> bool:
        return not isinstance(getattr(self, field_name), _Unset)

    def cleaned_additional_guests(self) -> list[str]:
        """Trimmed names with blanks dropped; empty when the list was not sent."""
        if not self.is_set("additional_guests") or self.additional_guests is None:
            return []
        return [name.strip() for name in self.additional_guests if name.strip()]


@dataclass(frozen=True)
class RSVPUpdateResultDTO:
    previous: GuestDTO
    guest: GuestDTO
    event: EventDTO


@dataclass(frozen=True)
class HostRecipientDTO:
    """A host or co-host who opted in to RSVP change emails."""

    user_id: UUID
    email: str
    name: str | None = None
