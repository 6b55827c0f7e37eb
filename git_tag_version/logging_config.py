"""
Logging configuration for Git Tag Version.

Centralized logging setup to avoid circular imports and provide
consistent logging configuration across the application.
"""

import sys

from loguru import logger
from rich.console import Console

VERBOSE = 'VERBOSE'
LOG_FORMAT = '<green>{time:YYYY/MM/DD HH:mm:ss}</green> | {level.icon}  - <level>{message}</level>'


def register_verbose_level() -> None:
    """Register custom VERBOSE level (between INFO=20 and DEBUG=10)."""
    try:
        logger.level(VERBOSE, no=15, color="<cyan>", icon="ℹ️")
    except (TypeError, ValueError):
        # Level already exists, which is fine
        pass


def setup_logging(log_level: str = 'INFO', console: Console = None) -> None:
    """
    Set up logging configuration with an optional shared Rich console.
    
    Args:
        log_level: Logging level (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL)
        console: Rich Console instance to route log output through (optional)
    """
    register_verbose_level()
    
    logger.remove()
    
    if console:
        # Tag names can contain square brackets, so Rich markup must stay off
        logger.add(
            lambda msg: console.print(msg, end='', markup=False, highlight=False),
            level=log_level,
            format=LOG_FORMAT,
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=LOG_FORMAT,
            colorize=True,
        )


# Modules log at VERBOSE before setup_logging runs (e.g. when used as a library)
register_verbose_level()
