"""Per-check records attached to a pull request."""

from typing import List, Literal

from pydantic import BaseModel, Field

CheckStatus = Literal["passed", "failed", "pending"]


class CheckInfo(BaseModel):
    """A failed check: name and optional link to its run."""

    model_config = {"frozen": True}

    name: str
    details_url: str | None = None


class CheckResult(BaseModel):
    """One check (run or status context) with its classified outcome."""

    model_config = {"frozen": True}

    name: str
    status: CheckStatus
    details_url: str | None = None


class CheckCounts(BaseModel):
    """Derived check tallies. Never persisted."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    pending: int = 0
    failed_names: List[str] = Field(default_factory=list)
