"""Guest-count and deadline checks applied before an RSVP is written."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class GuestLimitResult:
    valid: bool
    error: str | None = None
    # Free slots left after this submission; inf when unlimited
    remaining: float = math.inf


def effective_guest_limit(event_limit: int | None, guest_limit: int | None) -> int | None:
    """Per-guest override wins over the event-wide cap; None means unlimited."""
    if guest_limit is not None:
        return guest_limit
    return event_limit


def validate_guest_limit(effective_limit: int | None, additional_count: int) -> GuestLimitResult:
    """Check a party size against a limit that counts the invitee themself.

    A limit of L allows L - 1 additional names (zero when L is 1).
    """
    if effective_limit is None:
        return GuestLimitResult(valid=True)

    max_additional = max(effective_limit - 1, 0)
    if additional_count > max_additional:
        plural = "" if max_additional == 1 else "s"
        return GuestLimitResult(
            valid=False,
            error=(
                f"You can only bring {max_additional} additional guest{plural} "
                f"(total of {effective_limit} including yourself)"
            ),
            remaining=0,
        )

    return GuestLimitResult(valid=True, remaining=max_additional - additional_count)


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_rsvp_allowed(rsvp_deadline: datetime | None, now: datetime) -> bool:
    if rsvp_deadline is None:
        return True
    return as_utc(now) <= as_utc(rsvp_deadline)
