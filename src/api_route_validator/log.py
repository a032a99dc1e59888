"""Logging setup for the command line."""

import logging
import sys

LOGGER_NAME = "api_route_validator"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int = 0) -> logging.Logger:
    """Send package logs to stderr; -v is INFO, -vv is DEBUG."""
    logger = logging.getLogger(LOGGER_NAME)
    level = level_for(verbosity)
    logger.setLevel(level)

    # Replace our handler on every call; stderr may have been swapped since the last one.
    for handler in list(logger.handlers):
        if getattr(handler, "_api_route_validator", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._api_route_validator = True
    logger.addHandler(handler)
    return logger
