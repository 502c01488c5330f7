"""
Logging setup for hosts embedding the engine.
"""

import logging

from page_builder.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging for the engine.

    Args:
        level: Explicit level; defaults to Settings.log_level (DEBUG when debug is on)
    """
    settings = get_settings()
    if level is None:
        level = "DEBUG" if settings.debug else settings.log_level

    logging.basicConfig(level=level, format=LOG_FORMAT)
