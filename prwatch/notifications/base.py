"""Abstract notification sink."""

from abc import ABC, abstractmethod


class NotificationService(ABC):
    """Delivers user-facing notifications (desktop, log, chat, ...)."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether notifications can be delivered at all."""
        ...

    @property
    @abstractmethod
    def permission_requested(self) -> bool:
        ...

    @abstractmethod
    def request_permission(self) -> None:
        """Ask for delivery permission. Called once when the manager is built."""
        ...

    @abstractmethod
    def send(self, title: str, body: str, url: str | None = None) -> None:
        ...
