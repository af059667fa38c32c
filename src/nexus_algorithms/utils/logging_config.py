"""
Logging configuration for Nexus Algorithms.

All modules obtain their logger through ``get_logger(__name__)`` so records
share the ``nexus_algorithms`` hierarchy. Applications (or scripts) call
``setup_logging()`` once to attach a handler.

Usage:
    from nexus_algorithms.utils.logging_config import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Training finished")
"""

import logging
from typing import Optional, Union

PACKAGE_LOGGER_NAME = "nexus_algorithms"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the package hierarchy.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER_NAME and not name.startswith(PACKAGE_LOGGER_NAME + "."):
        name = f"{PACKAGE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: Optional[Union[int, str]] = None, fmt: str = DEFAULT_FORMAT
) -> logging.Logger:
    """
    Configure the package logger with a single stream handler.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates.

    Args:
        level: Logging level name or number. Defaults to ``NEXUS_LOG_LEVEL``
            from the loaded configuration.
        fmt: Log record format string

    Returns:
        The configured package logger

    Raises:
        ValueError: If the level name is not a known logging level
    """
    if level is None:
        from ..config import config

        level = config.log_level

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_nexus_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    handler._nexus_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
