import secrets
from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.table_names import TableNames
from src.guests.dtos import CoHostRole, GuestStatus
from src.models.base import Base, TimeStamp
from src.models.user import User  # noqa: F401  registers the users table


def generate_rsvp_token() -> str:
    return secrets.token_urlsafe(24)


class Event(Base, TimeStamp):
    __tablename__ = TableNames.EVENTS.value

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Responses after this instant are rejected
    rsvp_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # JSON, either [7, 3, 1] (legacy, days) or [{"type": "day", "value": 7}, ...]
    reminder_schedule: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Total party size per invitee including themself; None means unlimited
    max_guests_per_invitee: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reply_to: Mapped[str | None] = mapped_column(String(255), nullable=True)

    host_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.USERS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    guests: Mapped[list["Guest"]] = relationship("Guest", back_populates="event")
    co_hosts: Mapped[list["CoHost"]] = relationship("CoHost", back_populates="event")

    def __repr__(self) -> str:
        return f"<Event {self.title}>"


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event: Mapped["Event"] = relationship("Event", back_populates="guests")

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[GuestStatus] = mapped_column(
        Enum(GuestStatus, name="rsvp_status_enum"),
        default=GuestStatus.PENDING,
        nullable=False,
        index=True,
    )
    dietary_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    notify_by_email: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notify_by_sms: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Overrides event.max_guests_per_invitee for this guest only
    max_guests: Mapped[int | None] = mapped_column(Integer, nullable=True)

    token: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True, default=generate_rsvp_token
    )
    invited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # One marker per channel, set the first time a reminder goes out
    reminder_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    sms_reminder_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    additional_guests: Mapped[list["AdditionalGuest"]] = relationship(
        "AdditionalGuest",
        back_populates="guest",
        cascade="all, delete-orphan",
        order_by="AdditionalGuest.position",
    )

    def __repr__(self) -> str:
        return f"<Guest {self.email} - {self.status}>"


class AdditionalGuest(Base, TimeStamp):
    __tablename__ = TableNames.ADDITIONAL_GUESTS.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest: Mapped["Guest"] = relationship("Guest", back_populates="additional_guests")

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<AdditionalGuest {self.name} for guest {self.guest_id}>"


class CoHost(Base, TimeStamp):
    __tablename__ = TableNames.CO_HOSTS.value
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_co_host"),)

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event: Mapped["Event"] = relationship("Event", back_populates="co_hosts")

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.USERS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[CoHostRole] = mapped_column(
        Enum(CoHostRole, name="co_host_role_enum"),
        default=CoHostRole.COHOST,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CoHost {self.user_id} ({self.role}) on {self.event_id}>"


class AppConfig(Base, TimeStamp):
    """Notification credentials entered by an admin, one row per key."""

    __tablename__ = TableNames.APP_CONFIG.value
    __table_args__ = (UniqueConstraint("category", "key", name="uq_app_config_key"),)

    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<AppConfig {self.category}.{self.key}>"
