"""Typed access to persisted settings on top of a key-value backend.

Loading never raises: a missing, corrupt or wrong-typed value is logged and
replaced by the default.
"""

import json
import logging
from typing import Any, Set

from pydantic import ValidationError

from prwatch.models import FilterSettings
from prwatch.store.backends import SettingsBackend

POLLING_INTERVAL_KEY = "polling_interval"
COLLAPSED_REPOS_KEY = "collapsed_repos"
FILTER_SETTINGS_KEY = "filter_settings"
COLLAPSED_READINESS_SECTIONS_KEY = "collapsedReadinessSections"

DEFAULT_REFRESH_INTERVAL = 60
DEFAULT_COLLAPSED_READINESS_SECTIONS = frozenset({"notReady"})

LOG = logging.getLogger("prwatch.store.settings_store")


def _string_set(value: Any) -> Set[str] | None:
    if not isinstance(value, (list, tuple, set)):
        return None
    if not all(isinstance(v, str) for v in value):
        return None
    return set(value)


class SettingsStore:
    """Load/save refresh interval, collapsed repos/sections and filter settings."""

    def __init__(self, backend: SettingsBackend, default_refresh_interval: int = DEFAULT_REFRESH_INTERVAL) -> None:
        self._backend = backend
        self._default_refresh_interval = default_refresh_interval

    def load_refresh_interval(self) -> int:
        saved = self._backend.get(POLLING_INTERVAL_KEY)
        if isinstance(saved, bool) or not isinstance(saved, int) or saved <= 0:
            if saved is not None:
                LOG.warning("Invalid stored refresh interval %r, using default", saved)
            return self._default_refresh_interval
        LOG.debug("load_refresh_interval: %ss", saved)
        return saved

    def save_refresh_interval(self, value: int) -> None:
        self._backend.set(POLLING_INTERVAL_KEY, value)
        LOG.debug("save_refresh_interval: %ss", value)

    def load_collapsed_repos(self) -> Set[str]:
        saved = self._backend.get(COLLAPSED_REPOS_KEY)
        result = _string_set(saved)
        if result is None:
            if saved is not None:
                LOG.warning("Invalid stored collapsed repos, using default")
            return set()
        return result

    def save_collapsed_repos(self, value: Set[str]) -> None:
        self._backend.set(COLLAPSED_REPOS_KEY, sorted(value))
        LOG.debug("save_collapsed_repos: %s repos", len(value))

    def load_filter_settings(self) -> FilterSettings:
        saved = self._backend.get(FILTER_SETTINGS_KEY)
        if saved is None:
            LOG.info("No saved filter settings, using defaults")
            return FilterSettings()
        try:
            if isinstance(saved, (str, bytes)):
                saved = json.loads(saved)
            if not isinstance(saved, dict):
                raise TypeError(f"expected a mapping, got {type(saved).__name__}")
            return FilterSettings.from_record(saved)
        except (ValueError, TypeError, ValidationError) as e:
            LOG.warning("Failed to decode filter settings, using defaults: %s", e)
            return FilterSettings()

    def save_filter_settings(self, value: FilterSettings) -> None:
        self._backend.set(FILTER_SETTINGS_KEY, value.to_record())
        LOG.debug("save_filter_settings: %s", value.to_record())

    def load_collapsed_readiness_sections(self) -> Set[str]:
        saved = self._backend.get(COLLAPSED_READINESS_SECTIONS_KEY)
        result = _string_set(saved)
        if result is None:
            return set(DEFAULT_COLLAPSED_READINESS_SECTIONS)
        return result

    def save_collapsed_readiness_sections(self, value: Set[str]) -> None:
        self._backend.set(COLLAPSED_READINESS_SECTIONS_KEY, sorted(value))
        LOG.debug("save_collapsed_readiness_sections: %s sections", len(value))
