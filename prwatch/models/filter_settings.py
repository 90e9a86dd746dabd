"""User filter preferences, persisted in the settings store.

Stored under camelCase keys. Missing keys decode to field defaults and
unknown keys are ignored, so records written by older or newer versions
still load.
"""

from typing import Set

from pydantic import BaseModel, ConfigDict, Field, field_serializer

DEFAULT_REVIEW_SLA_MINUTES = 480


class FilterSettings(BaseModel):
    """Review filters, check overrides and review SLA."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hide_drafts: bool = Field(default=True, alias="hideDrafts")
    required_check_names: Set[str] = Field(default_factory=set, alias="requiredCheckNames")
    ignored_check_names: Set[str] = Field(default_factory=set, alias="ignoredCheckNames")
    hide_approved_by_me: bool = Field(default=False, alias="hideApprovedByMe")
    hide_not_ready: bool = Field(default=False, alias="hideNotReady")
    ignored_repositories: Set[str] = Field(default_factory=set, alias="ignoredRepositories")
    review_sla_enabled: bool = Field(default=False, alias="reviewSLAEnabled")
    review_sla_minutes: int = Field(default=DEFAULT_REVIEW_SLA_MINUTES, alias="reviewSLAMinutes")

    @field_serializer("required_check_names", "ignored_check_names", "ignored_repositories")
    def _sorted_names(self, value: Set[str]) -> list[str]:
        return sorted(value)

    def to_record(self) -> dict:
        """Plain dict for persistence (camelCase keys, sets as sorted lists)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: dict) -> "FilterSettings":
        """Decode a persisted record. Raises pydantic.ValidationError on wrong types."""
        return cls.model_validate(record)
