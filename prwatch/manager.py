"""PR manager: owns the PR snapshot, drives refreshes and persists settings.

One refresh fetches "my PRs" and "review PRs" in parallel, keeps the old
list of whichever source failed, notifies on CI transitions of my PRs
(never on the first load) and combines both errors into ``last_error``.

Stopping polling discards the result of a refresh that is still in
flight: its fetches run to completion but nothing is published.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, List, Set

from pydantic import BaseModel

from prwatch import strings
from prwatch.adapters.base import FetchError, PRFetcher
from prwatch.detector import CIStates, detect_changes, snapshot
from prwatch.grouping import (
    NOT_READY_SECTION,
    READY_SECTION,
    RepoGroup,
    ReviewSections,
    apply_review_filters,
    exclude_ignored_repositories,
    grouped,
    partition_reviews,
)
from prwatch.models import FilterSettings, PullRequest
from prwatch.notifications.base import NotificationService
from prwatch.scheduler import PollingScheduler
from prwatch.store.settings_store import SettingsStore
from prwatch.summary import (
    ICON_NO_PRS,
    has_failure,
    overall_status_icon,
    refresh_interval_label,
    render_status_glyph,
    status_bar_summary,
)

LOG = logging.getLogger("prwatch.manager")


class FetchResult(BaseModel):
    """Outcome of one fetch: a PR list or an error message."""

    prs: List[PullRequest] | None = None
    error: str | None = None

    @classmethod
    def ok(cls, prs: List[PullRequest]) -> "FetchResult":
        return cls(prs=list(prs))

    @classmethod
    def failed(cls, message: str) -> "FetchResult":
        return cls(error=message)


class FetchMerge(BaseModel):
    """What to publish after a refresh. None lists mean "keep the current one"."""

    pull_requests: List[PullRequest] | None = None
    review_prs: List[PullRequest] | None = None
    error: str | None = None


def combine_fetch_results(mine: FetchResult, reviews: FetchResult) -> FetchMerge:
    """Merge the two fetch outcomes into data updates and one error string.

    Both failed: "<mine> | Reviews: <reviews>"; one failed: that message
    alone; none failed: None.
    """
    errors = []
    if mine.error is not None:
        errors.append(mine.error)
    if reviews.error is not None:
        errors.append(strings.review_error(reviews.error))
    return FetchMerge(
        pull_requests=mine.prs if mine.error is None else None,
        review_prs=reviews.prs if reviews.error is None else None,
        error=strings.ERROR_SEPARATOR.join(errors) if errors else None,
    )


def _fetch(fn: Callable[[str], List[PullRequest]], user: str, label: str) -> FetchResult:
    try:
        prs = fn(user)
    except FetchError as e:
        LOG.error("%s fetch failed: %s", label, e)
        return FetchResult.failed(str(e))
    except Exception as e:
        LOG.exception("%s fetch failed unexpectedly: %s", label, e)
        return FetchResult.failed(str(e) or e.__class__.__name__)
    LOG.info("%s fetched (%s results)", label, len(prs))
    return FetchResult.ok(prs)


class PRManager:
    """Single owner of PR state, errors and user settings."""

    def __init__(
        self,
        fetcher: PRFetcher,
        settings_store: SettingsStore,
        notification_service: NotificationService,
        scheduler: PollingScheduler | None = None,
        user: str | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._store = settings_store
        self._notifier = notification_service
        self._scheduler = scheduler or PollingScheduler()

        self.user = user
        self.pull_requests: List[PullRequest] = []
        self.review_prs: List[PullRequest] = []
        self.last_error: str | None = None
        self.has_completed_initial_load = False
        self.is_refreshing = False

        self._previous_ci_states: CIStates = {}
        self._previous_pr_keys: Set[str] = set()
        self._glyph_key: tuple[str, bool] | None = None
        self.status_glyph = render_status_glyph(ICON_NO_PRS, False)

        self._state_lock = threading.RLock()
        self._refresh_lock = threading.Lock()
        self._settings_lock = threading.RLock()
        self._generation = 0

        self._refresh_interval = settings_store.load_refresh_interval()
        self._collapsed_repos = settings_store.load_collapsed_repos()
        self._filter_settings = settings_store.load_filter_settings()
        self._collapsed_readiness_sections = settings_store.load_collapsed_readiness_sections()

        notification_service.request_permission()

    # Lifecycle

    def resolve_user(self) -> str | None:
        """Ask the fetcher for the authenticated login unless one is already set."""
        if self.user:
            return self.user
        try:
            self.user = self._fetcher.current_user()
        except FetchError as e:
            LOG.warning("Could not resolve user: %s", e)
            self.user = None
        LOG.info("Resolved user: %s", self.user)
        return self.user

    def start(self, polling: bool = True) -> None:
        """Resolve the user, refresh once, then poll at the refresh interval."""
        self.resolve_user()
        self.refresh_all()
        if polling:
            self.start_polling()

    def start_polling(self) -> None:
        self._scheduler.start(self._refresh_interval, self.refresh_all)

    def stop_polling(self) -> None:
        with self._state_lock:
            self._generation += 1
        self._scheduler.stop()

    @property
    def is_polling(self) -> bool:
        return self._scheduler.is_running

    @property
    def next_refresh_date(self) -> datetime | None:
        return self._scheduler.next_refresh_date

    # Refresh

    def refresh_all(self) -> None:
        """Fetch both lists, diff, notify and publish. Never raises."""
        user = self.user
        if not user:
            LOG.warning("refresh_all: no user, aborting")
            with self._state_lock:
                self.last_error = strings.NOT_AUTHENTICATED
            return

        if not self._refresh_lock.acquire(blocking=False):
            LOG.info("refresh_all: already in progress, skipping")
            return
        try:
            with self._state_lock:
                self.is_refreshing = True
                generation = self._generation
            LOG.info("refresh_all: starting (user=%s)", user)

            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="prwatch-fetch") as pool:
                mine_future = pool.submit(_fetch, self._fetcher.fetch_my_prs, user, "My PRs")
                reviews_future = pool.submit(_fetch, self._fetcher.fetch_review_prs, user, "Review PRs")
                mine = mine_future.result()
                reviews = reviews_future.result()

            with self._state_lock:
                if generation != self._generation:
                    LOG.info("refresh_all: polling stopped during refresh, discarding results")
                    return
                self._publish(combine_fetch_results(mine, reviews))
        finally:
            with self._state_lock:
                self.is_refreshing = False
            self._refresh_lock.release()
            LOG.info("refresh_all: done")

    def _publish(self, merge: FetchMerge) -> None:
        if merge.pull_requests is not None:
            prs = merge.pull_requests
            if self.has_completed_initial_load:
                self._notify_status_changes(prs)
            self._previous_ci_states, self._previous_pr_keys = snapshot(prs)
            self.pull_requests = prs
        if merge.review_prs is not None:
            self.review_prs = merge.review_prs
        self.last_error = merge.error
        if merge.error:
            LOG.warning("refresh_all: %s", merge.error)
        self._update_status_glyph_if_needed()
        self.has_completed_initial_load = True

    def _notify_status_changes(self, new_prs: List[PullRequest]) -> None:
        notifications = detect_changes(self._previous_ci_states, self._previous_pr_keys, new_prs)
        for notification in notifications:
            try:
                self._notifier.send(notification.title, notification.body, notification.url)
            except Exception as e:
                LOG.warning("Failed to deliver notification %r: %s", notification.title, e)

    # Status indicator

    def _update_status_glyph_if_needed(self) -> None:
        key = (overall_status_icon(self.pull_requests), has_failure(self.pull_requests))
        if key == self._glyph_key:
            return
        self._glyph_key = key
        self.status_glyph = render_status_glyph(*key)

    @property
    def status_bar_summary(self) -> str:
        return status_bar_summary(self.pull_requests)

    @property
    def notifications_available(self) -> bool:
        return self._notifier.is_available

    # Derived views

    @property
    def visible_pull_requests(self) -> List[PullRequest]:
        return exclude_ignored_repositories(self._filter_settings, self.pull_requests)

    @property
    def visible_review_prs(self) -> List[PullRequest]:
        return exclude_ignored_repositories(self._filter_settings, self.review_prs)

    @property
    def filtered_review_prs(self) -> List[PullRequest]:
        return apply_review_filters(self._filter_settings, self.visible_review_prs)

    def grouped_pull_requests(self) -> List[RepoGroup]:
        return grouped(self.visible_pull_requests, is_reviews=False)

    def grouped_review_prs(self) -> List[RepoGroup]:
        return grouped(self.filtered_review_prs, is_reviews=True)

    def review_sections(self, now: datetime | None = None) -> ReviewSections:
        return partition_reviews(self._filter_settings, self.filtered_review_prs, now)

    # Settings (each setter persists synchronously after assigning)

    @property
    def filter_settings(self) -> FilterSettings:
        return self._filter_settings.model_copy(deep=True)

    def set_filter_settings(self, value: FilterSettings) -> None:
        with self._settings_lock:
            self._filter_settings = value.model_copy(deep=True)
            self._store.save_filter_settings(self._filter_settings)

    def update_filter_settings(self, mutator: Callable[[FilterSettings], None]) -> FilterSettings:
        """Apply ``mutator`` to a copy of the filter settings, then assign and persist it."""
        with self._settings_lock:
            updated = self._filter_settings.model_copy(deep=True)
            mutator(updated)
            self.set_filter_settings(updated)
            return self.filter_settings

    @property
    def refresh_interval(self) -> int:
        return self._refresh_interval

    @property
    def refresh_interval_label(self) -> str:
        return refresh_interval_label(self._refresh_interval)

    def set_refresh_interval(self, seconds: int) -> None:
        """Change the polling interval; a running poll loop restarts with it."""
        if seconds <= 0:
            raise ValueError(f"refresh interval must be positive, got {seconds}")
        with self._settings_lock:
            self._refresh_interval = seconds
            self._store.save_refresh_interval(seconds)
        if self._scheduler.is_running:
            self.start_polling()

    @property
    def collapsed_repos(self) -> Set[str]:
        return set(self._collapsed_repos)

    def set_collapsed_repos(self, repos: Set[str]) -> None:
        with self._settings_lock:
            self._collapsed_repos = set(repos)
            self._store.save_collapsed_repos(self._collapsed_repos)

    def toggle_repo_collapsed(self, repo: str) -> None:
        with self._settings_lock:
            self.set_collapsed_repos(self._collapsed_repos ^ {repo})

    @property
    def collapsed_readiness_sections(self) -> Set[str]:
        return set(self._collapsed_readiness_sections)

    def set_collapsed_readiness_sections(self, sections: Set[str]) -> None:
        unknown = set(sections) - {READY_SECTION, NOT_READY_SECTION}
        if unknown:
            raise ValueError(f"unknown readiness sections: {sorted(unknown)}")
        with self._settings_lock:
            self._collapsed_readiness_sections = set(sections)
            self._store.save_collapsed_readiness_sections(self._collapsed_readiness_sections)

    def toggle_readiness_section(self, section: str) -> None:
        with self._settings_lock:
            self.set_collapsed_readiness_sections(self._collapsed_readiness_sections ^ {section})
