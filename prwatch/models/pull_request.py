"""Pull request model, rebuilt from the forge response on every poll."""

from datetime import UTC, datetime
from typing import List, Literal

from pydantic import BaseModel, Field

from prwatch.models.checks import CheckInfo, CheckResult

PRState = Literal["open", "draft", "merged", "closed"]
CIStatus = Literal["success", "failure", "pending", "unknown"]
ReviewDecision = Literal["none", "review_required", "changes_requested", "approved"]
MergeableState = Literal["mergeable", "conflicting", "unknown"]


def make_pr_key(owner: str, repo: str, number: int) -> str:
    """Stable identity across refreshes: owner/repo#number."""
    return f"{owner}/{repo}#{number}"


class PullRequest(BaseModel):
    """Pull request snapshot as observed in one refresh.

    ``ci_status`` is the raw overall status reported by the forge; use
    :mod:`prwatch.readiness` for values adjusted by required/ignored checks.
    """

    model_config = {"frozen": True}

    owner: str
    repo: str
    number: int
    title: str
    url: str
    author: str = "unknown"
    state: PRState = "open"
    ci_status: CIStatus = "unknown"
    is_in_merge_queue: bool = False
    checks_total: int = 0
    checks_passed: int = 0
    checks_failed: int = 0
    head_sha: str = ""
    head_ref_name: str = ""
    last_fetched: datetime = Field(default_factory=lambda: datetime.now(UTC))
    published_at: datetime | None = None
    review_decision: ReviewDecision = "none"
    mergeable: MergeableState = "unknown"
    queue_position: int | None = None
    approval_count: int = 0
    failed_checks: List[CheckInfo] = Field(default_factory=list)
    check_results: List[CheckResult] = Field(default_factory=list)
    viewer_has_approved: bool = False

    @property
    def key(self) -> str:
        return make_pr_key(self.owner, self.repo, self.number)

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def display_number(self) -> str:
        return f"#{self.number}"

    @property
    def sort_priority(self) -> int:
        """Open = 0, draft = 1, in merge queue = 2, merged/closed = 3."""
        if self.is_in_merge_queue:
            return 2
        if self.state == "open":
            return 0
        if self.state == "draft":
            return 1
        return 3

    @property
    def review_sort_priority(self) -> int:
        """Needs review first (0), then changes requested (1), then approved (2)."""
        if self.review_decision == "changes_requested":
            return 1
        if self.review_decision == "approved":
            return 2
        return 0
