"""Readiness and effective (override-adjusted) CI status of a pull request.

Two overrides apply on top of the raw forge status:

- ignored checks are removed from the per-check results before the status
  is recomputed, so a cosmetic failure does not turn a PR red;
- required checks, when configured, are the only checks that decide
  readiness; a required check the PR does not report never blocks.

Draft and conflicting PRs are never ready, whatever the configuration.
"""

from datetime import UTC, datetime, timedelta
from typing import Iterable, List, Literal

from prwatch.models import CheckCounts, CheckInfo, CheckResult, CIStatus, PullRequest

StatusColor = Literal["green", "red", "orange", "purple", "gray"]

CI_STATUS_COLORS: dict[str, StatusColor] = {
    "success": "green",
    "failure": "red",
    "pending": "orange",
    "unknown": "gray",
}


def effective_check_results(pr: PullRequest, ignored_checks: Iterable[str] = ()) -> List[CheckResult]:
    ignored = set(ignored_checks)
    return [c for c in pr.check_results if c.name not in ignored]


def effective_failed_checks(pr: PullRequest, ignored_checks: Iterable[str] = ()) -> List[CheckInfo]:
    ignored = set(ignored_checks)
    return [c for c in pr.failed_checks if c.name not in ignored]


def effective_check_counts(pr: PullRequest, ignored_checks: Iterable[str] = ()) -> CheckCounts:
    results = effective_check_results(pr, ignored_checks)
    failed = [c.name for c in results if c.status == "failed"]
    return CheckCounts(
        total=len(results),
        passed=sum(1 for c in results if c.status == "passed"),
        failed=len(failed),
        pending=sum(1 for c in results if c.status == "pending"),
        failed_names=failed,
    )


def effective_ci_status(pr: PullRequest, ignored_checks: Iterable[str] = ()) -> CIStatus:
    """CI status recomputed from per-check results minus ignored checks.

    Without per-check results the raw status is returned as is. If every
    result is ignored the status is unknown.
    """
    if not pr.check_results:
        return pr.ci_status
    results = effective_check_results(pr, ignored_checks)
    if not results:
        return "unknown"
    if any(c.status == "failed" for c in results):
        return "failure"
    if any(c.status == "pending" for c in results):
        return "pending"
    return "success"


def _color_for(pr: PullRequest, ci_status: CIStatus) -> StatusColor:
    if pr.state == "draft":
        return "gray"
    if pr.state == "merged":
        return "purple"
    if pr.state == "closed":
        return "gray"
    if pr.is_in_merge_queue:
        return "purple"
    return CI_STATUS_COLORS[ci_status]


def status_color(pr: PullRequest) -> StatusColor:
    """Color from the raw CI status."""
    return _color_for(pr, pr.ci_status)


def effective_status_color(pr: PullRequest, ignored_checks: Iterable[str] = ()) -> StatusColor:
    return _color_for(pr, effective_ci_status(pr, ignored_checks))


def is_ready(
    pr: PullRequest,
    required_checks: Iterable[str] = (),
    ignored_checks: Iterable[str] = (),
) -> bool:
    """Whether the PR is ready for review under the given check configuration."""
    if pr.state == "draft" or pr.mergeable == "conflicting":
        return False

    ignored = set(ignored_checks)
    active_required = set(required_checks) - ignored
    if active_required:
        by_name: dict[str, CheckResult] = {}
        for result in pr.check_results:
            by_name.setdefault(result.name, result)
        for name in active_required:
            result = by_name.get(name)
            if result is not None and result.status != "passed":
                return False
        return True

    return effective_ci_status(pr, ignored) in ("success", "unknown")


def is_sla_exceeded(pr: PullRequest, minutes: int, now: datetime | None = None) -> bool:
    """True when the PR has waited strictly longer than ``minutes`` since publication."""
    if pr.published_at is None:
        return False
    now = now or datetime.now(UTC)
    published = pr.published_at
    if published.tzinfo is None:
        published = published.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now - published > timedelta(minutes=minutes)
