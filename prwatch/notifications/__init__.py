"""Notification sinks."""

from prwatch.notifications.base import NotificationService
from prwatch.notifications.log_notifier import LogNotificationService

__all__ = ["LogNotificationService", "NotificationService"]
