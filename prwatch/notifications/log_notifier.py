"""Notification sink that writes to the log."""

import logging

from prwatch.notifications.base import NotificationService

LOG = logging.getLogger("prwatch.notifications")


class LogNotificationService(NotificationService):
    """Logs each notification at INFO. Disabled instances drop them."""

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._permission_requested = False

    @property
    def is_available(self) -> bool:
        return self._enabled

    @property
    def permission_requested(self) -> bool:
        return self._permission_requested

    def request_permission(self) -> None:
        self._permission_requested = True
        if not self._enabled:
            LOG.info("Notifications disabled in config")

    def send(self, title: str, body: str, url: str | None = None) -> None:
        if not self._enabled:
            LOG.debug("Notification skipped (disabled): %s", title)
            return
        if url:
            LOG.info("%s: %s (%s)", title, body, url)
        else:
            LOG.info("%s: %s", title, body)
