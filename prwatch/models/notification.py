"""Notification event produced by the status change detector."""

from pydantic import BaseModel


class StatusNotification(BaseModel):
    """Title, body and optional link. ``url`` is None for disappeared PRs."""

    model_config = {"frozen": True}

    title: str
    body: str
    url: str | None = None
