"""
Plants Care Bot — Watering reminder scheduler.

A repeating job on the bot's JobQueue ticks every ``interval`` seconds;
the JobQueue never overlaps two ticks. Once the local clock passes
``send_hour`` a tick reads one page of due groups and sends each owner a
reminder with a "watered" button, then records the delivery.

Pages are read with a keyset cursor over (next_watering_date, id) that
starts at the configured offset and resets when a page comes back short
or the day changes. A group whose dispatch fails is logged and skipped;
no Notification is stored for it, so a later tick retries it. Errors
escaping a tick are logged and the job keeps repeating until ``stop()``.

This module depends on StoragePort (through the use cases) and
TransportPort, not on sqlite or the Telegram API; only the JobQueue
registration touches python-telegram-bot.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from src.core.renderer import Screen, Snapshot, render
from src.core.use_cases import PlantsCareService
from src.data.models import Group, GroupDraft
from src.ports.storage_port import DuplicateNotification
from src.ports.transport_port import TransportPort

if TYPE_CHECKING:
    from telegram.ext import ContextTypes, Job, JobQueue

logger = logging.getLogger(__name__)

JOB_NAME = "watering_reminders"


class NotificationScheduler:
    def __init__(
        self,
        service: PlantsCareService,
        transport: TransportPort,
        interval: float | None = None,
        limit: int | None = None,
        offset: int | None = None,
        send_hour: int | None = None,
        dispatch_timeout: float | None = None,
    ) -> None:
        from src.config import settings

        self.service = service
        self.transport = transport
        self.interval = interval if interval is not None else settings.SCHEDULER_INTERVAL
        self.limit = limit if limit is not None else settings.SCHEDULER_LIMIT
        self.offset = offset if offset is not None else settings.SCHEDULER_OFFSET
        self.send_hour = send_hour if send_hour is not None else settings.SCHEDULER_SEND_HOUR
        self.dispatch_timeout = (
            dispatch_timeout if dispatch_timeout is not None else settings.SCHEDULER_DISPATCH_TIMEOUT
        )

        self._job_queue: JobQueue | None = None
        self._job: Job | None = None
        self._day: date | None = None
        self._cursor: tuple[date, int] | None = None
        self._notified: set[int] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._job is not None and not self._job.removed

    def schedule(self, job_queue: JobQueue) -> Job:
        """Register the repeating tick on the application's JobQueue."""
        if self._job is None:
            self._job_queue = job_queue
            self._job = job_queue.run_repeating(
                self.tick_job, interval=self.interval, first=0, name=JOB_NAME,
            )
            logger.info(
                "Watering reminders scheduled: every %ss after %02d:00, page size %d",
                self.interval, self.send_hour, self.limit,
            )
        return self._job

    def stop(self) -> None:
        """Remove the tick job. Safe to call twice."""
        job, self._job = self._job, None
        if job is None or job.removed:
            return
        # A shut-down JobQueue runs nothing and rejects removals.
        if self._job_queue.scheduler.running:
            job.schedule_removal()
        logger.info("Watering reminders stopped")

    async def tick_job(self, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            await self.tick()
        except Exception:
            logger.exception("Notification tick failed, recovered")

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def can_notify(self, now: datetime) -> bool:
        """Reminders go out only from send_hour local time onwards."""
        return now.hour >= self.send_hour

    async def tick(self) -> int:
        """Process one page of due groups. Returns the number of reminders sent."""
        now = self.service.now()
        if not self.can_notify(now):
            return 0

        today = now.date()
        if self._day != today:
            self._day = today
            self._cursor = None
            self._notified.clear()

        offset = self.offset if self._cursor is None else 0
        groups = self.service.get_groups_for_notify(self.limit, offset, after=self._cursor)

        sent = 0
        for group in groups:
            self._cursor = (group.next_watering_date, group.id)
            if group.id in self._notified:
                continue
            try:
                await asyncio.wait_for(self._notify(group), timeout=self.dispatch_timeout)
            except asyncio.TimeoutError:
                logger.error("Reminder for group #%d timed out after %.1fs", group.id, self.dispatch_timeout)
                continue
            except Exception:
                logger.exception("Failed to send reminder for group #%d", group.id)
                continue
            sent += 1

        if len(groups) < self.limit:
            self._cursor = None

        if groups:
            logger.info("Notification tick: %d due, %d sent", len(groups), sent)
        return sent

    async def _notify(self, group: Group) -> None:
        user = self.service.get_user_by_id(group.user_id)
        plants = self.service.get_group_plants(group.id)
        message = render(Screen.NOTIFY, Snapshot(group=GroupDraft.from_group(group), plants=plants))

        sent = await self.transport.send(user.telegram_id, message)
        self._notified.add(group.id)

        try:
            self.service.save_notification(group.id, sent)
        except DuplicateNotification:
            logger.warning("Group #%d was already notified today", group.id)
