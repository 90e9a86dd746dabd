"""Tests for readiness and effective CI status."""

from datetime import UTC, datetime, timedelta

import pytest

from prwatch.models import CheckInfo
from prwatch.readiness import (
    effective_check_counts,
    effective_check_results,
    effective_ci_status,
    effective_failed_checks,
    effective_status_color,
    is_ready,
    is_sla_exceeded,
    status_color,
)


class TestEffectiveCIStatus:
    """Status recomputed from per-check results minus ignored checks."""

    def test_no_check_results_returns_raw(self, make_pr) -> None:
        pr = make_pr(ci_status="pending")
        assert effective_ci_status(pr) == "pending"
        assert effective_ci_status(pr, {"anything"}) == "pending"

    def test_tally_wins_over_raw_status(self, make_pr) -> None:
        """With results present the tally decides, even with nothing ignored."""
        pr = make_pr(ci_status="failure", checks={"build": "passed"})
        assert effective_ci_status(pr, set()) == "success"

    def test_ignored_failure_turns_green(self, make_pr) -> None:
        pr = make_pr(ci_status="failure", checks={"build": "passed", "lint": "failed"})
        assert effective_ci_status(pr) == "failure"
        assert effective_ci_status(pr, {"lint"}) == "success"

    def test_all_ignored_is_unknown(self, make_pr) -> None:
        pr = make_pr(ci_status="success", checks={"lint": "passed"})
        assert effective_ci_status(pr, {"lint"}) == "unknown"

    def test_failed_beats_pending(self, make_pr) -> None:
        pr = make_pr(checks={"a": "pending", "b": "failed", "c": "passed"})
        assert effective_ci_status(pr) == "failure"
        assert effective_ci_status(pr, {"b"}) == "pending"


class TestEffectiveLists:
    """Results, failed checks and counts restricted to non-ignored names."""

    def test_effective_results_and_counts(self, make_pr) -> None:
        pr = make_pr(
            checks={"build": "passed", "lint": "failed", "e2e": "pending"},
            failed_checks=[CheckInfo(name="lint")],
        )
        assert [c.name for c in effective_check_results(pr, {"lint"})] == ["build", "e2e"]
        assert effective_failed_checks(pr, {"lint"}) == []
        assert [c.name for c in effective_failed_checks(pr)] == ["lint"]

        counts = effective_check_counts(pr, {"e2e"})
        assert (counts.total, counts.passed, counts.failed, counts.pending) == (2, 1, 1, 0)
        assert counts.failed_names == ["lint"]


class TestStatusColor:
    """State colors override CI colors."""

    def test_draft_always_gray(self, make_pr) -> None:
        pr = make_pr(state="draft", ci_status="failure", is_in_merge_queue=True)
        assert effective_status_color(pr) == "gray"

    def test_merged_and_closed(self, make_pr) -> None:
        assert effective_status_color(make_pr(state="merged")) == "purple"
        assert effective_status_color(make_pr(state="closed")) == "gray"

    def test_merge_queue_purple(self, make_pr) -> None:
        assert effective_status_color(make_pr(is_in_merge_queue=True, ci_status="failure")) == "purple"

    @pytest.mark.parametrize(
        "ci, color",
        [("success", "green"), ("failure", "red"), ("pending", "orange"), ("unknown", "gray")],
    )
    def test_ci_colors(self, make_pr, ci: str, color: str) -> None:
        assert effective_status_color(make_pr(ci_status=ci)) == color
        assert status_color(make_pr(ci_status=ci)) == color

    def test_ignored_check_changes_color(self, make_pr) -> None:
        pr = make_pr(ci_status="failure", checks={"build": "passed", "lint": "failed"})
        assert status_color(pr) == "red"
        assert effective_status_color(pr, {"lint"}) == "green"


class TestIsReady:
    """Gate conditions, required-checks mode and default mode."""

    @pytest.mark.parametrize("required", [set(), {"build"}, {"missing"}])
    def test_draft_never_ready(self, make_pr, required: set) -> None:
        pr = make_pr(state="draft", ci_status="success", checks={"build": "passed"})
        assert is_ready(pr, required, set()) is False

    @pytest.mark.parametrize("required", [set(), {"build"}])
    def test_conflicting_never_ready(self, make_pr, required: set) -> None:
        pr = make_pr(mergeable="conflicting", ci_status="success", checks={"build": "passed"})
        assert is_ready(pr, required, set()) is False

    def test_required_check_missing_is_ignored(self, make_pr) -> None:
        pr = make_pr(checks={"build": "passed"})
        assert is_ready(pr, {"deploy-preview"}) is True

    def test_required_check_failing_blocks(self, make_pr) -> None:
        pr = make_pr(checks={"build": "failed"})
        assert is_ready(pr, {"build"}) is False

    def test_required_check_pending_blocks(self, make_pr) -> None:
        pr = make_pr(checks={"build": "pending"})
        assert is_ready(pr, {"build"}) is False

    def test_required_mode_ignores_other_failures(self, make_pr) -> None:
        pr = make_pr(ci_status="failure", checks={"build": "passed", "flaky": "failed"})
        assert is_ready(pr, {"build"}) is True

    def test_required_and_ignored_overlap_falls_back_to_default_mode(self, make_pr) -> None:
        """A check both required and ignored is not required; with none left, the effective status decides."""
        pr = make_pr(checks={"build": "failed", "test": "failed"})
        assert is_ready(pr, {"build"}, {"build"}) is False
        assert is_ready(pr, {"build"}, {"build", "test"}) is True

    def test_default_mode(self, make_pr) -> None:
        assert is_ready(make_pr(ci_status="success")) is True
        assert is_ready(make_pr(ci_status="unknown")) is True
        assert is_ready(make_pr(ci_status="pending")) is False
        assert is_ready(make_pr(ci_status="failure")) is False

    def test_default_mode_with_ignored_failure(self, make_pr) -> None:
        pr = make_pr(ci_status="failure", checks={"build": "passed", "lint": "failed"})
        assert is_ready(pr, set(), {"lint"}) is True


class TestSLA:
    """Strict inequality on the publication age."""

    def test_no_published_at(self, make_pr) -> None:
        assert is_sla_exceeded(make_pr(), 1, datetime.now(UTC)) is False

    def test_boundary_not_exceeded(self, make_pr) -> None:
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        pr = make_pr(published_at=now - timedelta(minutes=480))
        assert is_sla_exceeded(pr, 480, now) is False

    def test_exceeded(self, make_pr) -> None:
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        pr = make_pr(published_at=now - timedelta(minutes=480, seconds=1))
        assert is_sla_exceeded(pr, 480, now) is True

    def test_defaults_to_current_time(self, make_pr) -> None:
        pr = make_pr(published_at=datetime.now(UTC) - timedelta(days=2))
        assert is_sla_exceeded(pr, 60) is True
