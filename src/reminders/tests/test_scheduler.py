import json
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from src.guests.tests.inmemory_models import InMemoryEmailService, InMemorySmsService, make_event, make_guest
from src.notifications.errors import EmailDeliveryError
from src.reminders.repository import ReminderChannel, ReminderRepository, UpcomingEventDTO
from src.reminders.scheduler import ReminderScheduler, seconds_until_next_run

NOW = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)


class InMemoryReminderRepository(ReminderRepository):
    """Holds upcoming events and keeps the sent markers on the guest DTOs."""

    def __init__(self, upcoming: list[UpcomingEventDTO]):
        self.upcoming = upcoming
        self.claims: list[tuple[UUID, ReminderChannel]] = []

    async def get_upcoming_events(self, start, end):
        return [
            item
            for item in self.upcoming
            if start <= item.event.date <= end
        ]

    async def claim_reminder(self, guest_id, channel, now):
        field = "reminder_sent_at" if channel == ReminderChannel.EMAIL else "sms_reminder_sent_at"
        for index, item in enumerate(self.upcoming):
            guests = list(item.pending_guests)
            for position, guest in enumerate(guests):
                if guest.uuid != guest_id:
                    continue
                if getattr(guest, field) is not None:
                    return False
                guests[position] = replace(guest, **{field: now})
                self.upcoming[index] = replace(item, pending_guests=guests)
                self.claims.append((guest_id, channel))
                return True
        return False


class FailingOnceRepository(InMemoryReminderRepository):
    def __init__(self, upcoming, failing_event_id):
        super().__init__(upcoming)
        self.failing_event_id = failing_event_id

    async def claim_reminder(self, guest_id, channel, now):
        for item in self.upcoming:
            if item.event.uuid == self.failing_event_id and any(g.uuid == guest_id for g in item.pending_guests):
                raise RuntimeError("database went away")
        return await super().claim_reminder(guest_id, channel, now)


def schedule_json(*specs: tuple[str, int]) -> str:
    return json.dumps([{"type": kind, "value": value} for kind, value in specs])


def upcoming_with_guest(date_offset: timedelta, reminder_schedule: str | None = None, **guest_kwargs):
    event = make_event(date=NOW + date_offset, reminder_schedule=reminder_schedule)
    guest = make_guest(event, **guest_kwargs)
    return UpcomingEventDTO(event=event, pending_guests=[guest])


def build_scheduler(repository, email_service=None, sms_service=None):
    email_service = email_service or InMemoryEmailService()
    sms_service = sms_service or InMemorySmsService()
    return ReminderScheduler(repository, email_service, sms_service), email_service, sms_service


@pytest.mark.asyncio
async def test_default_schedule_reminds_two_days_out():
    repository = InMemoryReminderRepository([upcoming_with_guest(timedelta(days=1, hours=20))])
    scheduler, email_service, _ = build_scheduler(repository)

    summary = await scheduler.run_once(now=NOW)

    assert summary.events_checked == 1
    assert summary.emails_sent == 1
    assert email_service.sent[0]["kind"] == "reminder"
    assert email_service.sent[0]["rsvp_token"] == "test-token-12345"


@pytest.mark.asyncio
async def test_event_not_due_sends_nothing():
    repository = InMemoryReminderRepository([upcoming_with_guest(timedelta(days=5))])
    scheduler, email_service, _ = build_scheduler(repository)

    summary = await scheduler.run_once(now=NOW)

    assert summary.events_checked == 1
    assert summary.emails_sent == 0
    assert email_service.sent == []


@pytest.mark.asyncio
async def test_one_day_reminder_boundary():
    schedule = schedule_json(("day", 1))
    due = upcoming_with_guest(timedelta(hours=23, minutes=59), schedule, email="due@example.com")
    early = upcoming_with_guest(timedelta(hours=25), schedule, email="early@example.com")
    scheduler, email_service, _ = build_scheduler(InMemoryReminderRepository([due, early]))

    await scheduler.run_once(now=NOW)

    assert [email["to_address"] for email in email_service.sent] == ["due@example.com"]


@pytest.mark.asyncio
async def test_second_run_does_not_resend():
    repository = InMemoryReminderRepository(
        [upcoming_with_guest(timedelta(hours=30), phone="+15551234567", notify_by_sms=True)]
    )
    scheduler, email_service, sms_service = build_scheduler(repository)

    first = await scheduler.run_once(now=NOW)
    second = await scheduler.run_once(now=NOW + timedelta(minutes=5))

    assert (first.emails_sent, first.sms_sent) == (1, 1)
    assert (second.emails_sent, second.sms_sent) == (0, 0)
    assert len(email_service.sent) == 1
    assert len(sms_service.sent) == 1


@pytest.mark.asyncio
async def test_only_first_of_several_specs_reaches_guest():
    schedule = schedule_json(("day", 7), ("day", 1))
    repository = InMemoryReminderRepository([upcoming_with_guest(timedelta(days=6, hours=12), schedule)])
    scheduler, email_service, _ = build_scheduler(repository)

    await scheduler.run_once(now=NOW)
    # a week later the 1-day spec is due, but the email marker is already set
    repository.upcoming = [
        replace(item, event=replace(item.event, date=NOW + timedelta(days=7, hours=12)))
        for item in repository.upcoming
    ]
    later = await scheduler.run_once(now=NOW + timedelta(days=7))

    assert later.emails_sent == 0
    assert len(email_service.sent) == 1


@pytest.mark.asyncio
async def test_opted_out_channels_are_skipped():
    repository = InMemoryReminderRepository(
        [upcoming_with_guest(timedelta(hours=30), notify_by_email=False, phone=None, notify_by_sms=True)]
    )
    scheduler, email_service, sms_service = build_scheduler(repository)

    summary = await scheduler.run_once(now=NOW)

    assert summary.emails_sent == 0
    assert summary.sms_sent == 0
    assert repository.claims == []


@pytest.mark.asyncio
async def test_unconfigured_sms_is_not_counted_as_sent():
    repository = InMemoryReminderRepository(
        [upcoming_with_guest(timedelta(hours=30), phone="+15551234567", notify_by_sms=True)]
    )
    scheduler, _, _ = build_scheduler(repository, sms_service=InMemorySmsService(configured=False))

    summary = await scheduler.run_once(now=NOW)

    assert summary.sms_sent == 0
    assert summary.errors == 0


@pytest.mark.asyncio
async def test_failed_email_counts_error_and_keeps_marker():
    repository = InMemoryReminderRepository([upcoming_with_guest(timedelta(hours=30))])
    email_service = InMemoryEmailService(error=EmailDeliveryError("SMTP down"))
    scheduler, _, _ = build_scheduler(repository, email_service=email_service)

    summary = await scheduler.run_once(now=NOW)

    assert summary.errors == 1
    assert summary.emails_sent == 0
    assert repository.upcoming[0].pending_guests[0].reminder_sent_at == NOW


@pytest.mark.asyncio
async def test_failing_event_does_not_stop_the_others():
    broken = upcoming_with_guest(timedelta(hours=30), email="broken@example.com")
    healthy = upcoming_with_guest(timedelta(hours=31), email="healthy@example.com")
    repository = FailingOnceRepository([broken, healthy], failing_event_id=broken.event.uuid)
    scheduler, email_service, _ = build_scheduler(repository)

    summary = await scheduler.run_once(now=NOW)

    assert summary.events_checked == 2
    assert summary.errors == 1
    assert [email["to_address"] for email in email_service.sent] == ["healthy@example.com"]


@pytest.mark.asyncio
async def test_lookahead_covers_longest_window():
    repository = InMemoryReminderRepository(
        [upcoming_with_guest(timedelta(days=13, hours=12), schedule_json(("day", 14)))]
    )
    scheduler, email_service, _ = build_scheduler(repository)

    summary = await scheduler.run_once(now=NOW)

    assert summary.events_checked == 1
    assert len(email_service.sent) == 1


def test_unreadable_schedule_falls_back_to_default():
    event = make_event(date=NOW + timedelta(hours=30), reminder_schedule="not json")

    assert ReminderScheduler.is_due(event, NOW) is True
    assert ReminderScheduler.is_due(replace(event, date=NOW + timedelta(days=3)), NOW) is False


def test_seconds_until_next_run():
    assert seconds_until_next_run(datetime(2026, 6, 1, 8, 0, tzinfo=UTC), 9) == 3600
    assert seconds_until_next_run(datetime(2026, 6, 1, 9, 0, tzinfo=UTC), 9) == 24 * 3600
    assert seconds_until_next_run(datetime(2026, 6, 1, 10, 30, tzinfo=UTC), 9) == 22.5 * 3600
