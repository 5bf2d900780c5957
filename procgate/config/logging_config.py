"""Process-wide logging configuration for the gateway runtime."""

from __future__ import annotations

import logging.config


def config_configure_logging(log_level: str) -> None:
    """Install the root console handler and `procgate` logger levels.

    Args:
        log_level: Level name applied to the `procgate` logger hierarchy.

    Returns:
        None: Logging is configured as a side effect.

    Raises:
        ValueError: Raised by dictConfig when the level name is invalid.
    """

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "procgate": {"level": log_level.upper()},
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }
    )
