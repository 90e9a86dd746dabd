"""Domain models for pull requests, checks, filter settings, notifications (Pydantic)."""

from prwatch.models.checks import CheckCounts, CheckInfo, CheckResult, CheckStatus
from prwatch.models.filter_settings import DEFAULT_REVIEW_SLA_MINUTES, FilterSettings
from prwatch.models.notification import StatusNotification
from prwatch.models.pull_request import (
    CIStatus,
    MergeableState,
    PRState,
    PullRequest,
    ReviewDecision,
    make_pr_key,
)

__all__ = [
    "CIStatus",
    "CheckCounts",
    "CheckInfo",
    "CheckResult",
    "CheckStatus",
    "DEFAULT_REVIEW_SLA_MINUTES",
    "FilterSettings",
    "MergeableState",
    "PRState",
    "PullRequest",
    "ReviewDecision",
    "StatusNotification",
    "make_pr_key",
]
