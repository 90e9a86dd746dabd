"""Turn decoded GraphQL search nodes into PullRequest models.

Every field except number, title, url and repository degrades to a default
instead of failing the record. A node missing a required field is dropped
(``parse_pr_node`` returns None); the rest of the batch is unaffected.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, Field

from prwatch.adapters.base import ApiError, InvalidResponseError
from prwatch.models import (
    CheckCounts,
    CheckInfo,
    CheckResult,
    CIStatus,
    MergeableState,
    PRState,
    PullRequest,
    ReviewDecision,
)

LOG = logging.getLogger("prwatch.parser")

COMPLETED = "COMPLETED"
PASSING_CONCLUSIONS = frozenset({"SUCCESS", "NEUTRAL", "SKIPPED"})
FAILING_STATUS_STATES = frozenset({"FAILURE", "ERROR"})
SHORT_SHA_LENGTH = 7

_REVIEW_DECISIONS: Dict[str, ReviewDecision] = {
    "APPROVED": "approved",
    "CHANGES_REQUESTED": "changes_requested",
    "REVIEW_REQUIRED": "review_required",
}

_MERGEABLE_STATES: Dict[str, MergeableState] = {
    "MERGEABLE": "mergeable",
    "CONFLICTING": "conflicting",
}


class CheckTally(BaseModel):
    """Result of classifying a commit's check contexts."""

    passed: int = 0
    failed: int = 0
    pending: int = 0
    failed_checks: List[CheckInfo] = Field(default_factory=list)
    check_results: List[CheckResult] = Field(default_factory=list)

    def counts(self) -> CheckCounts:
        return CheckCounts(
            total=self.passed + self.failed + self.pending,
            passed=self.passed,
            failed=self.failed,
            pending=self.pending,
            failed_names=[c.name for c in self.failed_checks],
        )


class RollupData(BaseModel):
    """Status rollup of the head commit."""

    state: str | None = None
    total_count: int = 0
    contexts: List[Dict[str, Any]] = Field(default_factory=list)


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_iso(s: str | None) -> datetime | None:
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def parse_pr_state(raw_state: str | None, is_draft: bool) -> PRState:
    """MERGED/CLOSED map directly; OPEN (or absent) is draft or open; anything else is open."""
    if raw_state == "MERGED":
        return "merged"
    if raw_state == "CLOSED":
        return "closed"
    if raw_state is None or raw_state == "OPEN":
        return "draft" if is_draft else "open"
    return "open"


def parse_review_decision(node: Dict[str, Any]) -> ReviewDecision:
    return _REVIEW_DECISIONS.get(_str(node.get("reviewDecision")) or "", "none")


def parse_mergeable_state(node: Dict[str, Any]) -> MergeableState:
    return _MERGEABLE_STATES.get(_str(node.get("mergeable")) or "", "unknown")


def _tally_status_context(ctx: Dict[str, Any], name: str, tally: CheckTally) -> None:
    """Legacy commit status (StatusContext): state is SUCCESS, FAILURE/ERROR or pending-like."""
    url = _str(ctx.get("targetUrl"))
    state = _str(ctx.get("state")) or ""
    if state == "SUCCESS":
        tally.passed += 1
        tally.check_results.append(CheckResult(name=name, status="passed", details_url=url))
    elif state in FAILING_STATUS_STATES:
        tally.failed += 1
        tally.failed_checks.append(CheckInfo(name=name, details_url=url))
        tally.check_results.append(CheckResult(name=name, status="failed", details_url=url))
    else:
        tally.pending += 1
        tally.check_results.append(CheckResult(name=name, status="pending", details_url=url))


def _tally_check_run(ctx: Dict[str, Any], tally: CheckTally) -> None:
    status = _str(ctx.get("status")) or ""
    conclusion = _str(ctx.get("conclusion")) or ""
    if not status and not conclusion:
        return
    name = _str(ctx.get("name"))
    url = _str(ctx.get("detailsUrl"))

    if status != COMPLETED:
        tally.pending += 1
        if name is not None:
            tally.check_results.append(CheckResult(name=name, status="pending", details_url=url))
        return

    if conclusion in PASSING_CONCLUSIONS:
        tally.passed += 1
        if name is not None:
            tally.check_results.append(CheckResult(name=name, status="passed", details_url=url))
        return

    # FAILURE, CANCELLED, TIMED_OUT, ACTION_REQUIRED, STARTUP_FAILURE, ...
    tally.failed += 1
    if name is not None:
        tally.failed_checks.append(CheckInfo(name=name, details_url=url))
        tally.check_results.append(CheckResult(name=name, status="failed", details_url=url))


def tally_check_contexts(contexts: Iterable[Any]) -> CheckTally:
    """Classify check runs and status contexts into passed/failed/pending.

    A check run with neither status nor conclusion counts toward nothing.
    Counts do not depend on the order of ``contexts``.
    """
    tally = CheckTally()
    for ctx in contexts:
        if not isinstance(ctx, dict):
            continue
        context_name = _str(ctx.get("context"))
        if context_name is not None:
            _tally_status_context(ctx, context_name, tally)
        else:
            _tally_check_run(ctx, tally)
    return tally


def resolve_overall_status(
    total_count: int,
    passed: int,
    failed: int,
    pending: int,
    rollup: Dict[str, Any] | None,
) -> CIStatus:
    """Failed beats pending beats success. With nothing tallied, use the rollup state.

    ``total_count`` is informational only.
    """
    if passed + failed + pending == 0:
        state = _str(_dict(rollup).get("state")) or ""
        if state == "SUCCESS":
            return "success"
        if state == "FAILURE":
            return "failure"
        return "unknown"
    if failed > 0:
        return "failure"
    if pending > 0:
        return "pending"
    return "success"


def extract_rollup(node: Dict[str, Any]) -> RollupData | None:
    """Status rollup of the first commit node, or None when absent."""
    commits = _dict(node.get("commits")).get("nodes")
    if not isinstance(commits, list) or not commits:
        return None
    commit = _dict(_dict(commits[0]).get("commit"))
    rollup = commit.get("statusCheckRollup")
    if not isinstance(rollup, dict):
        return None
    contexts = _dict(rollup.get("contexts"))
    nodes = contexts.get("nodes")
    if not isinstance(nodes, list):
        nodes = []
    total = _int(contexts.get("totalCount"))
    if total is None:
        total = len(nodes)
    if total > len(nodes):
        LOG.warning("Check contexts truncated: %s/%s fetched", len(nodes), total)
    return RollupData(state=_str(rollup.get("state")), total_count=total, contexts=nodes)


def parse_check_status(node: Dict[str, Any]) -> tuple[CIStatus, int, CheckTally]:
    """Overall status, reported total and the tally for a PR node."""
    rollup = extract_rollup(node)
    if rollup is None:
        return "unknown", 0, CheckTally()
    tally = tally_check_contexts(rollup.contexts)
    status = resolve_overall_status(
        rollup.total_count,
        tally.passed,
        tally.failed,
        tally.pending,
        {"state": rollup.state},
    )
    return status, rollup.total_count, tally


def _viewer_has_approved(node: Dict[str, Any], viewer: str | None) -> bool:
    if not viewer:
        return False
    reviews = _dict(node.get("latestReviews")).get("nodes")
    if not isinstance(reviews, list):
        return False
    for review in reviews:
        review = _dict(review)
        login = _str(_dict(review.get("author")).get("login"))
        if login and login.lower() == viewer.lower() and review.get("state") == "APPROVED":
            return True
    return False


def parse_pr_node(node: Any, viewer: str | None = None) -> PullRequest | None:
    """Build a PullRequest from a search node. Returns None if a required field is missing."""
    if not isinstance(node, dict):
        return None
    number = _int(node.get("number"))
    title = _str(node.get("title"))
    url = _str(node.get("url"))
    name_with_owner = _str(_dict(node.get("repository")).get("nameWithOwner"))
    if number is None or title is None or not url or not name_with_owner:
        return None
    owner, sep, repo = name_with_owner.partition("/")
    if not sep or not owner or not repo:
        return None

    is_draft = node.get("isDraft") is True
    queue_entry = node.get("mergeQueueEntry")
    in_queue = isinstance(queue_entry, dict)
    status, total, tally = parse_check_status(node)

    return PullRequest(
        owner=owner,
        repo=repo,
        number=number,
        title=title,
        url=url,
        author=_str(_dict(node.get("author")).get("login")) or "unknown",
        state=parse_pr_state(_str(node.get("state")), is_draft),
        ci_status=status,
        is_in_merge_queue=in_queue,
        checks_total=total,
        checks_passed=tally.passed,
        checks_failed=tally.failed,
        head_sha=(_str(node.get("headRefOid")) or "")[:SHORT_SHA_LENGTH],
        head_ref_name=_str(node.get("headRefName")) or "",
        published_at=_parse_iso(_str(node.get("publishedAt"))),
        review_decision=parse_review_decision(node),
        mergeable=parse_mergeable_state(node),
        queue_position=_int(queue_entry.get("position")) if in_queue else None,
        approval_count=_int(_dict(node.get("reviews")).get("totalCount")) or 0,
        failed_checks=tally.failed_checks,
        check_results=tally.check_results,
        viewer_has_approved=_viewer_has_approved(node, viewer),
    )


def parse_search_response(payload: Any, viewer: str | None = None) -> List[PullRequest]:
    """Unwrap ``data.search.nodes`` and parse each node, dropping the ones that fail.

    GraphQL ``errors`` only fail the call when no node list came back; with
    partial data (e.g. a SAML-protected repository surfacing as a null node)
    the errors are logged and the remaining nodes are kept.
    """
    if not isinstance(payload, dict):
        raise InvalidResponseError()
    errors = payload.get("errors")
    if not isinstance(errors, list):
        errors = []
    nodes = _dict(_dict(payload.get("data")).get("search")).get("nodes")
    if not isinstance(nodes, list):
        if errors:
            raise ApiError(_str(_dict(errors[0]).get("message")))
        raise InvalidResponseError()
    for error in errors:
        error = _dict(error)
        LOG.warning("Partial search result: %s (path=%s)", _str(error.get("message")), error.get("path"))
    prs: List[PullRequest] = []
    for raw in nodes:
        pr = parse_pr_node(raw, viewer=viewer)
        if pr is None:
            LOG.debug("Dropping search node without required fields")
            continue
        prs.append(pr)
    return prs
