"""Local notifications for booking confirmations and reminders."""

from .local import LocalNotificationCenter
from .reminders import NotificationScheduler

__all__ = ["LocalNotificationCenter", "NotificationScheduler"]
