"""Loguru sink configuration for runtime entrypoints."""

import sys

from loguru import logger

from .settings import AppSettings


def config_configure_logging(settings: AppSettings) -> None:
    """Replace default loguru sinks with one stderr sink at the configured level.

    Args:
        settings: Validated runtime settings.

    Returns:
        None: Configures the global loguru logger as side effect.

    Raises:
        ValueError: Raised by loguru when the level name is unknown.
    """

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} | <level>{message}</level>",
        level=settings.log_level,
        colorize=sys.stderr.isatty(),
    )
