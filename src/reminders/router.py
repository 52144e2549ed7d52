import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from src.config.settings import settings
from src.notifications.container import get_notification_services
from src.reminders.repository import SqlReminderRepository
from src.reminders.scheduler import ReminderScheduler
from src.reminders.urls import RUN_REMINDERS_URL

logger = logging.getLogger(__name__)

router = APIRouter()


class ReminderRunResponse(BaseModel):
    success: bool = True
    events_checked: int
    emails_sent: int
    sms_sent: int
    errors: int


def get_reminder_scheduler() -> ReminderScheduler:
    services = get_notification_services()
    return ReminderScheduler(
        repository=SqlReminderRepository(),
        email_service=services.email_service,
        sms_service=services.sms_service,
        max_days_ahead=settings.reminder_max_days_ahead,
        max_hours_ahead=settings.reminder_max_hours_ahead,
    )


def get_cron_secret() -> str:
    return settings.CRON_SECRET


def verify_cron_secret(
    authorization: str | None = Header(default=None),
    cron_secret: str = Depends(get_cron_secret),
) -> None:
    # an empty secret leaves the endpoint open, for local development
    if not cron_secret:
        return
    if not authorization or not secrets.compare_digest(authorization, f"Bearer {cron_secret}"):
        logger.warning("Rejected reminder run with a bad cron secret")
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "Unauthorized"})


@router.post(
    RUN_REMINDERS_URL,
    response_model=ReminderRunResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def run_reminders(
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
) -> ReminderRunResponse:
    """Run one reminder pass. Meant for an external cron service."""
    summary = await scheduler.run_once()
    return ReminderRunResponse(
        events_checked=summary.events_checked,
        emails_sent=summary.emails_sent,
        sms_sent=summary.sms_sent,
        errors=summary.errors,
    )
