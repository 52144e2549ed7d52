import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from src.guests.dtos import EventDTO, GuestDTO
from src.notifications.email.base import EmailServiceBase
from src.notifications.sms.service import SmsService
from src.reminders import schedule
from src.reminders.repository import ReminderChannel, ReminderRepository

logger = logging.getLogger(__name__)


@dataclass
class ReminderRunSummary:
    events_checked: int = 0
    emails_sent: int = 0
    sms_sent: int = 0
    errors: int = 0


class ReminderScheduler:
    """One pass over upcoming events, reminding PENDING guests whose reminder is due.

    Each channel has a single sent marker per guest. Once a guest has had an
    email reminder, later specs on the same event do not email them again.
    """

    def __init__(
        self,
        repository: ReminderRepository,
        email_service: EmailServiceBase,
        sms_service: SmsService,
        max_days_ahead: int = 14,
        max_hours_ahead: int = 48,
    ):
        self._repository = repository
        self._email_service = email_service
        self._sms_service = sms_service
        self.lookahead = max(timedelta(days=max_days_ahead), timedelta(hours=max_hours_ahead))

    async def run_once(self, now: datetime | None = None) -> ReminderRunSummary:
        now = now or datetime.now(UTC)
        summary = ReminderRunSummary()

        upcoming = await self._repository.get_upcoming_events(now, now + self.lookahead)
        for item in upcoming:
            summary.events_checked += 1
            try:
                if not self.is_due(item.event, now):
                    continue
                for guest in item.pending_guests:
                    await self._remind_guest(item.event, guest, now, summary)
            except Exception:
                summary.errors += 1
                logger.exception("Reminder run failed for event %s", item.event.uuid)

        logger.info(
            "Reminder run done: %s events checked, %s emails, %s sms, %s errors",
            summary.events_checked,
            summary.emails_sent,
            summary.sms_sent,
            summary.errors,
        )
        return summary

    @staticmethod
    def is_due(event: EventDTO, now: datetime) -> bool:
        specs = schedule.decode(event.reminder_schedule) or schedule.DEFAULT_SCHEDULE
        return any(schedule.should_send_reminder(spec, event.date, now) for spec in specs)

    async def _remind_guest(
        self, event: EventDTO, guest: GuestDTO, now: datetime, summary: ReminderRunSummary
    ) -> None:
        if guest.notify_by_email and guest.reminder_sent_at is None:
            try:
                if await self._repository.claim_reminder(guest.uuid, ReminderChannel.EMAIL, now):
                    await self._email_service.send_reminder(
                        to_address=guest.email,
                        guest_name=guest.name,
                        event=event,
                        rsvp_token=guest.token,
                    )
                    summary.emails_sent += 1
            except Exception:
                summary.errors += 1
                logger.exception("Failed to send reminder email to guest %s", guest.uuid)

        if guest.notify_by_sms and guest.phone and guest.sms_reminder_sent_at is None:
            try:
                if await self._repository.claim_reminder(guest.uuid, ReminderChannel.SMS, now):
                    result = await self._sms_service.send_reminder(
                        to=guest.phone,
                        guest_name=guest.name,
                        event_title=event.title,
                        event_date=event.date,
                        rsvp_token=guest.token,
                    )
                    if result.sent:
                        summary.sms_sent += 1
                    else:
                        logger.warning("Reminder SMS to guest %s not sent: %s", guest.uuid, result.reason)
            except Exception:
                summary.errors += 1
                logger.exception("Failed to send reminder SMS to guest %s", guest.uuid)


def seconds_until_next_run(now: datetime, run_hour: int) -> float:
    next_run = now.replace(hour=run_hour, minute=0, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


class ReminderSchedulerLoop:
    """Runs the scheduler once a day at ``run_hour`` UTC inside the API process."""

    def __init__(self, scheduler: ReminderScheduler, run_hour: int = 9):
        self._scheduler = scheduler
        self._run_hour = run_hour
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._loop(), name="reminder-scheduler")
            logger.info("Reminder scheduler started, runs daily at %02d:00 UTC", self._run_hour)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(seconds_until_next_run(datetime.now(UTC), self._run_hour))
            try:
                await self._scheduler.run_once()
            except Exception:
                logger.exception("Scheduled reminder run failed")
