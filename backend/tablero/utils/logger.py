"""
Logging utilities
"""

import logging

from ..settings import settings


def setup_logger(name: str = "tablero", level: str | None = None) -> logging.Logger:
    """
    Setup a logger with a console handler.

    Args:
        name: Logger name (child loggers of `tablero.*` inherit it)
        level: Overrides settings.log_level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.log_format))
    logger.addHandler(handler)
    return logger
