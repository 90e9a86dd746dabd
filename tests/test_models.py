"""Tests for models: PullRequest identity/priorities and FilterSettings persistence format."""

import pytest
from pydantic import ValidationError

from prwatch.models import DEFAULT_REVIEW_SLA_MINUTES, FilterSettings, make_pr_key


class TestPullRequest:
    """Identity and sort priorities."""

    def test_key_format(self, make_pr) -> None:
        """Key is owner/repo#number."""
        pr = make_pr(owner="octo", repo="cat", number=42)
        assert pr.key == "octo/cat#42"
        assert pr.key == make_pr_key("octo", "cat", 42)
        assert pr.repo_full_name == "octo/cat"
        assert pr.display_number == "#42"

    def test_sort_priority_by_state(self, make_pr) -> None:
        assert make_pr(state="open").sort_priority == 0
        assert make_pr(state="draft").sort_priority == 1
        assert make_pr(state="merged").sort_priority == 3
        assert make_pr(state="closed").sort_priority == 3

    def test_merge_queue_overrides_state(self, make_pr) -> None:
        """An open PR in the merge queue sorts as 2."""
        assert make_pr(state="open", is_in_merge_queue=True).sort_priority == 2
        assert make_pr(state="draft", is_in_merge_queue=True).sort_priority == 2

    def test_review_sort_priority(self, make_pr) -> None:
        assert make_pr(review_decision="review_required").review_sort_priority == 0
        assert make_pr(review_decision="none").review_sort_priority == 0
        assert make_pr(review_decision="changes_requested").review_sort_priority == 1
        assert make_pr(review_decision="approved").review_sort_priority == 2

    def test_is_frozen(self, make_pr) -> None:
        pr = make_pr()
        with pytest.raises(ValidationError):
            pr.title = "changed"

    def test_unknown_state_rejected(self, make_pr) -> None:
        """State is a closed set; the parser maps unknown strings before construction."""
        with pytest.raises(ValidationError):
            make_pr(state="reopened")


class TestFilterSettings:
    """Defaults, equality and tolerant decoding."""

    def test_defaults(self) -> None:
        s = FilterSettings()
        assert s.hide_drafts is True
        assert s.required_check_names == set()
        assert s.ignored_check_names == set()
        assert s.hide_approved_by_me is False
        assert s.hide_not_ready is False
        assert s.ignored_repositories == set()
        assert s.review_sla_enabled is False
        assert s.review_sla_minutes == DEFAULT_REVIEW_SLA_MINUTES == 480

    def test_record_roundtrip_default(self) -> None:
        s = FilterSettings()
        assert FilterSettings.from_record(s.to_record()) == s

    def test_record_roundtrip_populated(self) -> None:
        s = FilterSettings(
            hide_drafts=False,
            required_check_names={"build", "test"},
            ignored_check_names={"lint"},
            hide_approved_by_me=True,
            hide_not_ready=True,
            ignored_repositories={"org/legacy"},
            review_sla_enabled=True,
            review_sla_minutes=60,
        )
        assert FilterSettings.from_record(s.to_record()) == s

    def test_json_roundtrip(self) -> None:
        s = FilterSettings(required_check_names={"ci"}, review_sla_minutes=15)
        assert FilterSettings.model_validate_json(s.model_dump_json(by_alias=True)) == s

    def test_record_uses_camel_case_keys_and_sorted_lists(self) -> None:
        record = FilterSettings(required_check_names={"b", "a"}).to_record()
        assert record["hideDrafts"] is True
        assert record["requiredCheckNames"] == ["a", "b"]
        assert record["reviewSLAMinutes"] == 480

    def test_empty_record_decodes_to_defaults(self) -> None:
        assert FilterSettings.from_record({}) == FilterSettings()

    def test_legacy_record_without_sla_fields(self) -> None:
        """A record from before SLA existed decodes SLA fields to defaults."""
        legacy = {"hideDrafts": False, "requiredCheckNames": ["ci"], "ignoredCheckNames": []}
        s = FilterSettings.from_record(legacy)
        assert s.hide_drafts is False
        assert s.required_check_names == {"ci"}
        assert s.review_sla_enabled is False
        assert s.review_sla_minutes == 480

    def test_unknown_keys_ignored(self) -> None:
        s = FilterSettings.from_record({"hideDrafts": False, "someFutureOption": 3})
        assert s == FilterSettings(hide_drafts=False)

    def test_structural_equality(self) -> None:
        assert FilterSettings(ignored_check_names={"x"}) == FilterSettings(ignored_check_names={"x"})
        assert FilterSettings(ignored_check_names={"x"}) != FilterSettings()

    def test_wrong_type_raises(self) -> None:
        with pytest.raises(ValidationError):
            FilterSettings.from_record({"reviewSLAMinutes": "soon"})
