"""
Logging utilities.
"""

import logging
import sys

PACKAGE_LOGGER = 'pollinet_kb'


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Package loggers take their level from the ``pollinet_kb`` logger,
    so ``set_log_level`` controls all of them at once.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(handler)
        logger.propagate = False

        if not name.startswith(PACKAGE_LOGGER):
            logger.setLevel(logging.INFO)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if package_logger.level == logging.NOTSET:
        package_logger.setLevel(logging.INFO)

    return logger


def set_log_level(level: int | str) -> None:
    """
    Set the global log level.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
