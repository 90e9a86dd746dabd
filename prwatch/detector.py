"""Diff two refreshes and produce notifications.

Only two transitions notify: pending -> failure and pending -> success.
New PRs, flapping success/failure and unchanged statuses stay silent.
A PR that disappears from the list notifies once.
"""

from typing import Iterable, List, Mapping, Set

from prwatch import strings
from prwatch.models import CIStatus, PullRequest, StatusNotification

CIStates = dict[str, CIStatus]


def snapshot(prs: Iterable[PullRequest]) -> tuple[CIStates, Set[str]]:
    """CI status per PR key and the set of keys, for the next diff."""
    states = {pr.key: pr.ci_status for pr in prs}
    return states, set(states)


def detect_changes(
    previous_ci_states: Mapping[str, CIStatus],
    previous_pr_keys: Iterable[str],
    new_prs: Iterable[PullRequest],
) -> List[StatusNotification]:
    """Notifications in current-PR order, then disappeared PRs sorted by key."""
    notifications: List[StatusNotification] = []
    new_keys: Set[str] = set()

    for pr in new_prs:
        new_keys.add(pr.key)
        old_status = previous_ci_states.get(pr.key)
        if old_status != "pending":
            continue
        if pr.ci_status == "failure":
            title = strings.CI_FAILED
        elif pr.ci_status == "success":
            title = strings.ALL_CHECKS_PASSED
        else:
            continue
        notifications.append(
            StatusNotification(
                title=title,
                body=strings.ci_status_body(pr.repo_full_name, pr.display_number, pr.title),
                url=pr.url,
            )
        )

    for key in sorted(set(previous_pr_keys) - new_keys):
        notifications.append(
            StatusNotification(title=strings.PR_NO_LONGER_OPEN, body=strings.pr_closed_body(key), url=None)
        )

    return notifications
