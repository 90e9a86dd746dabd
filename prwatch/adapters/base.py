"""Abstract fetch interface and the errors a fetch may raise."""

from abc import ABC, abstractmethod
from typing import List

from prwatch import strings
from prwatch.models import PullRequest


class FetchError(Exception):
    """Raised when pull requests cannot be fetched from the forge."""

    pass


class ForgeUnavailableError(FetchError):
    """Forge (or the tool used to reach it) is not available."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or strings.FORGE_UNAVAILABLE)


class FetchTimeoutError(FetchError):
    """Request did not complete in time."""

    def __init__(self) -> None:
        super().__init__(strings.FETCH_TIMEOUT)


class InvalidResponseError(FetchError):
    """Response could not be decoded into the expected shape."""

    def __init__(self) -> None:
        super().__init__(strings.INVALID_RESPONSE)


class ApiError(FetchError):
    """API-level error. Blank messages are replaced by a fixed fallback."""

    def __init__(self, message: str | None = None) -> None:
        text = (message or "").strip()
        super().__init__(text or strings.API_ERROR_FALLBACK)


class LaunchError(FetchError):
    """The fetch process or client could not be started."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(strings.launch_failed(detail))


class PRFetcher(ABC):
    """Source of the two pull request lists the manager polls."""

    @abstractmethod
    def current_user(self) -> str | None:
        """Login of the authenticated user, or None when not authenticated."""
        ...

    @abstractmethod
    def fetch_my_prs(self, user: str) -> List[PullRequest]:
        """Open PRs authored by ``user``."""
        ...

    @abstractmethod
    def fetch_review_prs(self, user: str) -> List[PullRequest]:
        """Open PRs with a pending review request for ``user``."""
        ...
