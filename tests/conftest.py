"""Shared fixtures: PullRequest factory and in-memory collaborators."""

from typing import Any, Callable

import pytest

from prwatch.models import CheckResult, PullRequest


def _build_pr(
    owner: str = "owner",
    repo: str = "repo",
    number: int = 1,
    checks: dict[str, str] | None = None,
    **kwargs: Any,
) -> PullRequest:
    """Build a PullRequest; ``checks`` maps check name -> passed/failed/pending."""
    if checks is not None:
        kwargs["check_results"] = [CheckResult(name=n, status=s) for n, s in checks.items()]
    kwargs.setdefault("title", f"PR {number}")
    kwargs.setdefault("url", f"https://github.com/{owner}/{repo}/pull/{number}")
    return PullRequest(owner=owner, repo=repo, number=number, **kwargs)


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    return _build_pr
