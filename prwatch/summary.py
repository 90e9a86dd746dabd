"""Derive the compact status indicator from the current PR list."""

from typing import Iterable, List

from prwatch.models import PullRequest

ICON_NO_PRS = "no_prs"
ICON_FAILURE = "failure"
ICON_PENDING = "pending"
ICON_ALL_CLOSED = "all_closed"
ICON_ALL_PASSING = "all_passing"

GLYPHS = {
    ICON_NO_PRS: "⇅",
    ICON_FAILURE: "✗",
    ICON_PENDING: "◷",
    ICON_ALL_CLOSED: "✓",
    ICON_ALL_PASSING: "✔",
}
FAILURE_BADGE = "●"


def overall_status_icon(prs: List[PullRequest]) -> str:
    if not prs:
        return ICON_NO_PRS
    if any(pr.ci_status == "failure" for pr in prs):
        return ICON_FAILURE
    if any(pr.ci_status == "pending" for pr in prs):
        return ICON_PENDING
    if all(pr.state in ("merged", "closed") for pr in prs):
        return ICON_ALL_CLOSED
    return ICON_ALL_PASSING


def has_failure(prs: Iterable[PullRequest]) -> bool:
    return any(pr.ci_status == "failure" for pr in prs)


def open_count(prs: Iterable[PullRequest]) -> int:
    """Open PRs not in the merge queue."""
    return sum(1 for pr in prs if pr.state == "open" and not pr.is_in_merge_queue)


def draft_count(prs: Iterable[PullRequest]) -> int:
    return sum(1 for pr in prs if pr.state == "draft")


def queued_count(prs: Iterable[PullRequest]) -> int:
    return sum(1 for pr in prs if pr.is_in_merge_queue)


def status_bar_summary(prs: List[PullRequest]) -> str:
    """Compact draft/open/queued summary, e.g. "3·10·2"; zero counts are omitted."""
    if not prs:
        return ""
    parts = [str(n) for n in (draft_count(prs), open_count(prs), queued_count(prs)) if n > 0]
    return "·".join(parts)


def render_status_glyph(icon: str, failure: bool) -> str:
    glyph = GLYPHS.get(icon, GLYPHS[ICON_NO_PRS])
    return f"{glyph}{FAILURE_BADGE}" if failure else glyph


def refresh_interval_label(interval: int) -> str:
    """Human-readable polling interval: "30s", "1 min", "5 min", "90s"."""
    if interval < 60:
        return f"{interval}s"
    if interval == 60:
        return "1 min"
    if interval % 60 == 0:
        return f"{interval // 60} min"
    return f"{interval}s"
