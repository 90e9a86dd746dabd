"""Persisted settings: key-value backends and the typed settings store."""

from prwatch.store.backends import MemoryBackend, SettingsBackend, YamlFileBackend
from prwatch.store.settings_store import (
    DEFAULT_COLLAPSED_READINESS_SECTIONS,
    DEFAULT_REFRESH_INTERVAL,
    SettingsStore,
)

__all__ = [
    "DEFAULT_COLLAPSED_READINESS_SECTIONS",
    "DEFAULT_REFRESH_INTERVAL",
    "MemoryBackend",
    "SettingsBackend",
    "SettingsStore",
    "YamlFileBackend",
]
