"""Tests for the polling scheduler."""

import threading
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from prwatch.scheduler import PollingScheduler

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class TestPollingScheduler:
    """Start/stop lifecycle and periodic execution."""

    def test_idle_by_default(self) -> None:
        scheduler = PollingScheduler()
        assert scheduler.is_running is False
        assert scheduler.next_refresh_date is None

    def test_start_sets_next_refresh_date(self) -> None:
        scheduler = PollingScheduler(clock=lambda: FIXED_NOW)
        scheduler.start(60, MagicMock())
        try:
            assert scheduler.is_running is True
            assert scheduler.next_refresh_date == FIXED_NOW + timedelta(seconds=60)
        finally:
            scheduler.stop()

    def test_stop_returns_to_idle(self) -> None:
        scheduler = PollingScheduler()
        action = MagicMock()
        scheduler.start(60, action)
        thread = scheduler._thread
        scheduler.stop()
        assert scheduler.is_running is False
        assert scheduler.next_refresh_date is None
        thread.join(timeout=2)
        assert not thread.is_alive()
        action.assert_not_called()

    def test_stop_when_idle_is_noop(self) -> None:
        scheduler = PollingScheduler()
        scheduler.stop()
        assert scheduler.is_running is False

    def test_restart_replaces_previous_loop(self) -> None:
        scheduler = PollingScheduler()
        scheduler.start(60, MagicMock())
        first = scheduler._thread
        scheduler.start(60, MagicMock())
        try:
            first.join(timeout=2)
            assert not first.is_alive()
            assert scheduler._thread is not first
            assert scheduler.is_running is True
        finally:
            scheduler.stop()

    def test_action_runs_periodically(self) -> None:
        scheduler = PollingScheduler()
        calls = []
        done = threading.Event()

        def action() -> None:
            calls.append(1)
            if len(calls) >= 2:
                done.set()

        scheduler.start(0.01, action)
        try:
            assert done.wait(timeout=5)
        finally:
            scheduler.stop()
        assert len(calls) >= 2

    def test_failing_action_keeps_loop_alive(self) -> None:
        scheduler = PollingScheduler()
        done = threading.Event()
        attempts = []

        def flaky() -> None:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")
            done.set()

        scheduler.start(0.01, flaky)
        try:
            assert done.wait(timeout=5)
        finally:
            scheduler.stop()
        assert len(attempts) >= 2

    def test_stop_with_join_timeout_waits_for_thread(self) -> None:
        scheduler = PollingScheduler()
        scheduler.start(60, MagicMock())
        thread = scheduler._thread
        scheduler.stop(join_timeout=2)
        assert not thread.is_alive()

    def test_stop_lets_running_action_finish(self) -> None:
        scheduler = PollingScheduler()
        entered = threading.Event()
        release = threading.Event()
        finished = threading.Event()

        def slow() -> None:
            entered.set()
            release.wait(timeout=5)
            finished.set()

        scheduler.start(0.01, slow)
        assert entered.wait(timeout=5)
        thread = scheduler._thread
        scheduler.stop()
        assert scheduler.is_running is False
        assert not finished.is_set()
        release.set()
        thread.join(timeout=2)
        assert finished.is_set()
        assert not thread.is_alive()

    def test_double_start_runs_a_single_loop(self) -> None:
        scheduler = PollingScheduler()
        calls = []
        lock = threading.Lock()

        def action() -> None:
            with lock:
                calls.append(threading.current_thread())

        scheduler.start(0.05, action)
        first = scheduler._thread
        scheduler.start(0.05, action)
        first.join(timeout=2)
        try:
            threading.Event().wait(0.3)
        finally:
            scheduler.stop(join_timeout=2)
        assert not first.is_alive()
        assert calls
        assert all(t is not first for t in calls)
        # one loop at 0.05s fits about 6 runs in 0.3s; two would double that
        assert len(calls) <= 8

    def test_runs_never_overlap_when_action_outlasts_interval(self) -> None:
        scheduler = PollingScheduler()
        lock = threading.Lock()
        in_flight = [0]
        max_in_flight = [0]
        runs = []
        enough = threading.Event()
        never = threading.Event()

        def slow() -> None:
            with lock:
                in_flight[0] += 1
                max_in_flight[0] = max(max_in_flight[0], in_flight[0])
            never.wait(0.15)
            with lock:
                in_flight[0] -= 1
                runs.append(1)
                if len(runs) >= 3:
                    enough.set()

        scheduler.start(0.05, slow)
        try:
            assert enough.wait(timeout=5)
        finally:
            scheduler.stop(join_timeout=2)
        assert max_in_flight[0] == 1
        assert len(runs) >= 3
