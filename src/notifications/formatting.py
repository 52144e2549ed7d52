from datetime import datetime
from uuid import UUID


def format_datetime(value: datetime) -> str:
    """e.g. ``Saturday, June 6, 2026 at 6:30 PM``"""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value:%A}, {value:%B} {value.day}, {value.year} at {hour}:{value:%M} {meridiem}"


def rsvp_link(app_url: str, token: str) -> str:
    return f"{app_url.rstrip('/')}/rsvp/{token}"


def event_link(app_url: str, event_id: UUID) -> str:
    return f"{app_url.rstrip('/')}/dashboard/events/{event_id}"
