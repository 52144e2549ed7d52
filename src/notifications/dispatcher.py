"""
Background fan-out of RSVP change emails to hosts and co-hosts.

The RSVP endpoint only enqueues a job; worker tasks resolve the recipients
and send one email each, so a slow or failing mail server never holds up the
guest's response.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.access.roles import EventAccessReadModel
from src.guests.dtos import ChangeType, EventDTO, GuestDTO, GuestStatus
from src.notifications.email.base import EmailServiceBase
from src.notifications.errors import NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostNotificationJob:
    event: EventDTO
    guest: GuestDTO
    change_type: ChangeType
    event_url: str
    previous_status: GuestStatus | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class HostNotificationDispatcher:
    def __init__(
        self,
        email_service: EmailServiceBase,
        access_read_model: EventAccessReadModel,
        maxsize: int = 1000,
        workers: int = 2,
    ):
        self._email_service = email_service
        self._access_read_model = access_read_model
        self._maxsize = maxsize
        self._worker_count = max(workers, 1)
        self._queue: asyncio.Queue[HostNotificationJob] | None = None
        self._workers: list[asyncio.Task] = []

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue else 0

    def start(self) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self._maxsize)
        self._workers = [task for task in self._workers if not task.done()]
        while len(self._workers) < self._worker_count:
            self._workers.append(asyncio.create_task(self._work(), name="host-notifications"))

    def enqueue(self, job: HostNotificationJob) -> bool:
        """Hand a job to the workers without waiting. Returns False if it was dropped."""
        self.start()
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.error(
                "Host notification queue full, dropping %s notification for guest %s",
                job.change_type.value,
                job.guest.uuid,
            )
            return False
        return True

    async def join(self) -> None:
        """Wait until every enqueued job has been attempted."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        await self.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

    async def _work(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.process(job)
            except Exception:
                # a worker must outlive any single job
                logger.exception("Host notification job failed for guest %s", job.guest.uuid)
            finally:
                self._queue.task_done()

    async def process(self, job: HostNotificationJob) -> int:
        """Email every opted-in host once. Returns how many emails went out."""
        recipients = await self._access_read_model.get_hosts_for_notification(job.event.uuid)
        sent = 0
        for recipient in recipients:
            try:
                await self._email_service.send_rsvp_change_notification(
                    to_address=recipient.email,
                    host_name=recipient.name,
                    event=job.event,
                    guest=job.guest,
                    change_type=job.change_type,
                    event_url=job.event_url,
                    previous_status=job.previous_status,
                )
            except NotificationError:
                logger.exception("Failed to notify host %s of RSVP change", recipient.email)
                continue
            sent += 1
        return sent
