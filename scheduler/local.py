"""
Local notification center backed by APScheduler.
Immediate notifications are delivered right away; future ones become
one-shot DateTrigger jobs whose job ID is the notification handle.
"""

import inspect
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional, Union
from uuid import uuid4

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from booking.ports import NotificationPort
from models.notification import LocalNotification
from utils.datetime_utils import utc_now
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level="INFO", log_file="notifications.log", log_dir="logs"
)

NotificationSink = Callable[[LocalNotification], Union[None, Awaitable[None]]]


def _log_notification(notification: LocalNotification) -> None:
    logger.info(f"🔔 {notification.title}: {notification.body}")


class LocalNotificationCenter(NotificationPort):
    """On-device notification scheduling; no network involved."""

    def __init__(
        self,
        scheduler: Optional[AsyncIOScheduler] = None,
        sink: Optional[NotificationSink] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self._sink = sink or _log_notification
        self._clock = clock

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if not self.running:
            self._scheduler.start()
            logger.info("Notification scheduler started")

    def shutdown(self) -> None:
        if self.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Notification scheduler stopped")

    async def schedule_local_notification(
        self,
        title: str,
        body: str,
        data: Optional[Mapping[str, Any]] = None,
        trigger_at: Optional[datetime] = None,
    ) -> str:
        notification = LocalNotification(
            handle=uuid4().hex,
            title=title,
            body=body,
            data=dict(data or {}),
            trigger_at=trigger_at,
        )

        if trigger_at is None or trigger_at <= self._clock():
            await self._deliver(notification)
            return notification.handle

        self._scheduler.add_job(
            self._deliver,
            trigger=DateTrigger(run_date=trigger_at),
            args=[notification],
            id=notification.handle,
            name=f"{title} ({notification.data.get('type', 'local')})",
            replace_existing=True,
        )
        logger.info(f"Local notification {notification.handle} scheduled for {trigger_at.isoformat()}")
        return notification.handle

    async def cancel(self, handle: str) -> bool:
        try:
            self._scheduler.remove_job(handle)
        except JobLookupError:
            logger.debug(f"Notification {handle} not pending, nothing to cancel")
            return False
        return True

    async def _deliver(self, notification: LocalNotification) -> None:
        result = self._sink(notification)
        if inspect.isawaitable(result):
            await result
