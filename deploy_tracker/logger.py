import logging
import sys
from colorlog import ColoredFormatter

LOGGER_NAME = "deploy_tracker"


def setup_logger(debug_mode=False, level=None):
    """
    Install a colored console handler on the package logger.

    Modules log through logging.getLogger(__name__), so everything below
    the deploy_tracker namespace ends up on this handler.

    Args:
        debug_mode: Force DEBUG level.
        level: Explicit level name (e.g. "WARNING"), ignored in debug mode.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if debug_mode:
        resolved = logging.DEBUG
    else:
        resolved = logging.getLevelName((level or "INFO").upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    logger.setLevel(resolved)

    # Create console handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)

    # Create colored formatter
    formatter = ColoredFormatter(
        "%(log_color)s[%(levelname)s] %(name)s: %(message)s",
        log_colors={
            "DEBUG":    "cyan",
            "INFO":     "green",
            "WARNING":  "yellow",
            "ERROR":    "red",
            "CRITICAL": "red,bg_white",
        }
    )
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger
