"""Configuration loading from YAML and environment.

The GitHub token is taken from the config file, the GITHUB_TOKEN
environment variable or a file named by GITHUB_TOKEN_FILE (Docker
secrets). Never put real tokens in config files committed to a repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SETTINGS_PATH = "~/.config/prwatch/settings.yaml"

# Injected by load_config so secrets are read from a consistent env snapshot
_current_env: dict[str, str] = {}


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="REST API base URL")
    graphql_url: str | None = Field(default=None, description="GraphQL endpoint (default: <api_url>/graphql)")
    username: str | None = Field(default=None, description="Login to watch; resolved from the token if unset")
    timeout: int = Field(default=30, ge=1, description="Request timeout in seconds")
    page_size: int = Field(default=100, ge=1, le=100, description="Max PRs per search")


class PollingConfig(BaseSettings):
    """Polling settings. The persisted interval, when present, wins over the default."""

    model_config = SettingsConfigDict(env_prefix="POLLING_", extra="ignore")

    enabled: bool = Field(default=True, description="Keep polling after the first refresh")
    default_interval_seconds: int = Field(default=60, ge=1, description="Interval used when none is saved")


class NotificationsConfig(BaseSettings):
    """Notification settings."""

    model_config = SettingsConfigDict(env_prefix="NOTIFICATIONS_", extra="ignore")

    enabled: bool = Field(default=True, description="Deliver CI transition notifications")


class SettingsFileConfig(BaseSettings):
    """Where user settings (filters, interval, collapsed groups) are persisted."""

    model_config = SettingsConfigDict(env_prefix="SETTINGS_", extra="ignore")

    path: str = Field(default=DEFAULT_SETTINGS_PATH, description="YAML settings file")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    library_level: str = Field(default="WARNING", description="Level of urllib3/requests loggers")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    settings: SettingsFileConfig = Field(default_factory=SettingsFileConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file yields defaults (still overridable through env).
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        github=GitHubConfig(**(raw.get("github") or {})),
        polling=PollingConfig(**(raw.get("polling") or {})),
        notifications=NotificationsConfig(**(raw.get("notifications") or {})),
        settings=SettingsFileConfig(**(raw.get("settings") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
