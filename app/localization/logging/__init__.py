"""Structured logging for the localization runtime.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module

Example:
    from localization.logging import get_module_logger

    logger = get_module_logger()
    logger.info("locale_changed", locale="it")
"""

from localization.logging.setup import configure_logging, get_module_logger

__all__ = [
    "configure_logging",
    "get_module_logger",
]
