"""Key-value backends for the settings store.

YamlFileBackend keeps every key in one YAML document on disk; the file is
rewritten on each ``set``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

import yaml

LOG = logging.getLogger("prwatch.store.backends")


class SettingsBackend(ABC):
    """get/set persistence of plain values (str, int, bool, list, dict)."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """Stored value or None when missing."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...


class MemoryBackend(SettingsBackend):
    """In-process backend (tests, ``--once`` runs without a settings file)."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class YamlFileBackend(SettingsBackend):
    """All settings in a single YAML file. A missing or unreadable file reads as empty."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to read settings %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            LOG.warning("Ignoring settings %s: not a mapping", self._path)
            return {}
        return data

    def get(self, key: str) -> Any:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            raw = yaml.dump(
                self._data,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=1000,
            )
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(raw, encoding="utf-8")
        LOG.debug("Saved setting %s to %s", key, self._path)
