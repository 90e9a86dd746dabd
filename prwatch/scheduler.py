"""Polling scheduler: run an action every interval in a daemon thread.

The wait happens before each run and only starts again once the action has
returned, so two runs never overlap. ``start`` replaces any running loop;
``stop`` wakes the sleeping loop so it exits without running the action.
"""

import logging
import threading
from datetime import UTC, datetime, timedelta
from typing import Callable

LOG = logging.getLogger("prwatch.scheduler")


def _now() -> datetime:
    return datetime.now(UTC)


class PollingScheduler:
    """Cancellable, restartable periodic timer."""

    def __init__(self, clock: Callable[[], datetime] = _now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._next_refresh_date: datetime | None = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._stop_event is not None and not self._stop_event.is_set()

    @property
    def next_refresh_date(self) -> datetime | None:
        """Estimated time of the next run, or None when idle."""
        with self._lock:
            return self._next_refresh_date

    def start(self, interval: float, action: Callable[[], None]) -> None:
        """Start polling every ``interval`` seconds. Cancels any running loop first."""
        self.stop()
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(interval, action, stop_event),
            name="prwatch-poller",
            daemon=True,
        )
        with self._lock:
            self._stop_event = stop_event
            self._thread = thread
            self._next_refresh_date = self._clock() + timedelta(seconds=interval)
        thread.start()
        LOG.debug("Polling started (interval=%ss)", interval)

    def stop(self, join_timeout: float | None = None) -> None:
        """Cancel the loop and reset to idle.

        An action already running is not interrupted: it completes on the
        old thread, and the loop exits right after it returns. Pass
        ``join_timeout`` to wait (up to that many seconds) for that thread.
        """
        with self._lock:
            if self._stop_event is None:
                return
            self._stop_event.set()
            thread = self._thread
            self._stop_event = None
            self._thread = None
            self._next_refresh_date = None
        if join_timeout is not None and thread is not None and thread is not threading.current_thread():
            thread.join(join_timeout)
        LOG.debug("Polling stopped")

    def _run(self, interval: float, action: Callable[[], None], stop_event: threading.Event) -> None:
        while not stop_event.wait(interval):
            try:
                action()
            except Exception as e:
                LOG.exception("Polling action failed: %s", e)
            with self._lock:
                if stop_event.is_set():
                    return
                self._next_refresh_date = self._clock() + timedelta(seconds=interval)
