from uuid import UUID

from fastapi import Depends, Header, HTTPException

from src.access.roles import EventAccessReadModel
from src.notifications.container import get_notification_services


def get_event_access_read_model() -> EventAccessReadModel:
    return get_notification_services().access_read_model


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """The acting user, as set by the authenticating proxy in front of the API."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "Unauthorized"})
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "Unauthorized"}) from None


async def require_event_manager(
    event_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    access: EventAccessReadModel = Depends(get_event_access_read_model),
) -> UUID:
    """Hosts, co-hosts and admins pass; viewers and strangers get 403."""
    if not await access.can_manage(user_id, event_id):
        raise HTTPException(status_code=403, detail={"code": "FORBIDDEN", "message": "Forbidden"})
    return user_id
