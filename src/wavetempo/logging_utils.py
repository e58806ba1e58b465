"""Console logging setup for applications embedding wavetempo."""

import logging
import sys


def setup_logger(level=logging.INFO, name: str = "wavetempo") -> logging.Logger:
    """
    Attach a stdout handler to the package logger.

    Args:
        level: Logging level, either an int or a level name ("DEBUG", ...)
        name: Logger to configure

    Returns:
        The configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)

    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    # Debug output carries module and line, normal output stays short
    if level == logging.DEBUG:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)'
        )
    else:
        formatter = logging.Formatter('%(levelname)s: %(message)s')

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
