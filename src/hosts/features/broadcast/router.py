import logging
from enum import Enum
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from src.guests.dtos import GuestStatus
from src.hosts.dependencies import require_event_manager
from src.hosts.repository import HostEventModel, get_host_event_model
from src.hosts.urls import BROADCAST_URL
from src.notifications.container import get_notification_services
from src.notifications.email.base import EmailServiceBase
from src.notifications.sms.service import SmsService

logger = logging.getLogger(__name__)

router = APIRouter()


class SendVia(str, Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    BOTH = "BOTH"


class BroadcastSubmit(BaseModel):
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)
    send_via: SendVia = Field(validation_alias=AliasChoices("send_via", "sendVia"))
    filter_status: Literal["ALL", "ATTENDING", "NOT_ATTENDING", "MAYBE", "PENDING"] = Field(
        default="ALL",
        validation_alias=AliasChoices("filter_status", "filterStatus"),
    )


class BroadcastResponse(BaseModel):
    success: bool = True
    sent_to: int
    errors: list[str] = []


def get_broadcast_channels() -> tuple[EmailServiceBase, SmsService]:
    services = get_notification_services()
    return services.email_service, services.sms_service


@router.post(BROADCAST_URL, response_model=BroadcastResponse)
async def broadcast(
    event_id: UUID,
    body: BroadcastSubmit,
    _: UUID = Depends(require_event_manager),
    host_event_model: HostEventModel = Depends(get_host_event_model),
    channels: tuple[EmailServiceBase, SmsService] = Depends(get_broadcast_channels),
) -> BroadcastResponse:
    """
    Message every guest of an event, optionally only those with one status.
    Each channel is tried on its own; a guest is listed in ``errors`` when
    any attempted channel raised, and counted as reached otherwise.
    """
    email_service, sms_service = channels

    event = await host_event_model.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Event not found"})

    status = None if body.filter_status == "ALL" else GuestStatus(body.filter_status)
    guests = await host_event_model.list_guests(event_id, status)

    use_email = body.send_via in (SendVia.EMAIL, SendVia.BOTH)
    use_sms = body.send_via in (SendVia.SMS, SendVia.BOTH)

    sent_to = 0
    errors: list[str] = []
    for guest in guests:
        send_email = use_email and guest.notify_by_email
        send_sms = use_sms and guest.notify_by_sms and bool(guest.phone)
        if not (send_email or send_sms):
            continue

        failed = False
        if send_email:
            try:
                await email_service.send_broadcast(
                    to_address=guest.email,
                    guest_name=guest.name,
                    event=event,
                    subject=body.subject,
                    message=body.message,
                    rsvp_token=guest.token,
                )
            except Exception:
                logger.exception("Failed to send broadcast email to %s", guest.email)
                failed = True
        if send_sms:
            try:
                result = await sms_service.send_broadcast(
                    to=guest.phone,
                    guest_name=guest.name,
                    event_title=event.title,
                    message=body.message,
                )
            except Exception:
                logger.exception("Failed to send broadcast SMS to guest %s", guest.uuid)
                failed = True
            else:
                if not result.sent:
                    logger.warning("Broadcast SMS to guest %s not sent: %s", guest.uuid, result.reason)

        if failed:
            errors.append(guest.email)
        else:
            sent_to += 1

    return BroadcastResponse(sent_to=sent_to, errors=errors)
