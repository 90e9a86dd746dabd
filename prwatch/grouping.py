"""Filtering, grouping and sectioning of PR lists for display."""

from datetime import datetime
from typing import Iterable, List

from pydantic import BaseModel, Field

from prwatch.models import FilterSettings, PullRequest
from prwatch.readiness import is_ready, is_sla_exceeded

READY_SECTION = "ready"
NOT_READY_SECTION = "notReady"


class RepoGroup(BaseModel):
    """PRs of one repository, already sorted."""

    repo: str
    prs: List[PullRequest] = Field(default_factory=list)


class ReviewSections(BaseModel):
    """Review PRs split into SLA-exceeded, ready and not-ready sections."""

    sla_exceeded: List[PullRequest] = Field(default_factory=list)
    ready: List[PullRequest] = Field(default_factory=list)
    not_ready: List[PullRequest] = Field(default_factory=list)


def apply_review_filters(settings: FilterSettings, prs: Iterable[PullRequest]) -> List[PullRequest]:
    """Drop PRs failing any enabled filter. Relative order is preserved."""
    result = []
    for pr in prs:
        if settings.hide_drafts and pr.state == "draft":
            continue
        if settings.hide_approved_by_me and pr.viewer_has_approved:
            continue
        if settings.hide_not_ready and not is_ready(
            pr, settings.required_check_names, settings.ignored_check_names
        ):
            continue
        result.append(pr)
    return result


def exclude_ignored_repositories(settings: FilterSettings, prs: Iterable[PullRequest]) -> List[PullRequest]:
    """Drop PRs whose owner/repo is in ``settings.ignored_repositories``."""
    ignored = settings.ignored_repositories
    return [pr for pr in prs if pr.repo_full_name not in ignored]


def grouped(prs: Iterable[PullRequest], is_reviews: bool) -> List[RepoGroup]:
    """Group by owner/repo (groups sorted by name) and sort each group.

    Reviews: review priority, then fewest approvals, then state priority.
    Own PRs: state priority, then number. Remaining ties keep input order.
    """
    by_repo: dict[str, List[PullRequest]] = {}
    for pr in prs:
        by_repo.setdefault(pr.repo_full_name, []).append(pr)

    if is_reviews:
        def sort_key(pr: PullRequest) -> tuple:
            return (pr.review_sort_priority, pr.approval_count, pr.sort_priority)
    else:
        def sort_key(pr: PullRequest) -> tuple:
            return (pr.sort_priority, pr.number)

    return [RepoGroup(repo=repo, prs=sorted(by_repo[repo], key=sort_key)) for repo in sorted(by_repo)]


def partition_reviews(
    settings: FilterSettings,
    prs: Iterable[PullRequest],
    now: datetime | None = None,
) -> ReviewSections:
    """Split review PRs: SLA-exceeded first (when enabled), the rest by readiness."""
    sections = ReviewSections()
    for pr in prs:
        if settings.review_sla_enabled and is_sla_exceeded(pr, settings.review_sla_minutes, now):
            sections.sla_exceeded.append(pr)
        elif is_ready(pr, settings.required_check_names, settings.ignored_check_names):
            sections.ready.append(pr)
        else:
            sections.not_ready.append(pr)
    return sections
