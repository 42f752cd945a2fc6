"""Logging setup for the export-leaderboard command."""

from __future__ import annotations

import logging
import logging.config
import os

from rainbet_leaderboard.paths import config_file

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# requests' transport libraries; urllib3 logs every connection at DEBUG
QUIET_LOGGERS = {
    "urllib3": logging.INFO,
    "charset_normalizer": logging.WARNING,
}


def _resolve_level(default: str = "DEBUG") -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", default).upper())
    return level if isinstance(level, int) else logging.DEBUG


def configure_logging() -> logging.Logger:
    """Configure the root logger from ``logging.ini`` or a plain stderr handler.

    ``LOG_LEVEL`` wins over the level in the ini file.
    """
    root = logging.getLogger()
    config_path = config_file("logging.ini", "LOGGING_CONFIG_FILE")
    if config_path.is_file():
        logging.config.fileConfig(str(config_path), disable_existing_loggers=False)
    elif not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    root.setLevel(_resolve_level())
    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
    return root
