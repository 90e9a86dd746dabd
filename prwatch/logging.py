"""Root logger setup for prwatch.

Each poll issues a few HTTP requests, so the HTTP client loggers
(``urllib3``, ``requests``) get their own level, WARNING by default, to keep
INFO output limited to refreshes and notifications.

Configure via config.yaml (logging.level, logging.format,
logging.library_level) or env (LOGGING_LEVEL, LOGGING_FORMAT,
LOGGING_LIBRARY_LEVEL). ``prwatch --verbose`` forces DEBUG for prwatch
loggers.
"""

import logging

from prwatch.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HTTP_LOGGERS = ("urllib3", "requests")


def _resolve_level(level: str, default: int = logging.INFO) -> int:
    return LEVELS.get(level.upper().strip(), default)


class PrwatchLogging:
    """Applies LoggingConfig to the root logger and the HTTP client loggers."""

    def __init__(self, config: LoggingConfig, verbose: bool = False) -> None:
        self._level = logging.DEBUG if verbose else _resolve_level(config.level)
        self._library_level = _resolve_level(config.library_level, logging.WARNING)
        self._format = config.format or DEFAULT_FORMAT

    @property
    def level(self) -> int:
        return self._level

    def setup(self) -> None:
        logging.basicConfig(level=self._level, format=self._format, force=True)
        for name in HTTP_LOGGERS:
            logging.getLogger(name).setLevel(self._library_level)
        logging.getLogger("prwatch").debug(
            "Logging configured (level=%s, http=%s)",
            logging.getLevelName(self._level),
            logging.getLevelName(self._library_level),
        )
