"""Logging configuration for the relay.

This module provides centralized logging configuration using Loguru.
It sets up logging to stderr and to a rotating file under the user's
home directory. Library modules only import `logger`; the command line
calls `setup_logging` once at startup.
"""

import sys
from pathlib import Path

from loguru import logger

LOG_DIR = Path.home() / ".unwrap-relay" / "logs"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(debug: bool = False, log_file: bool = True) -> None:
    """Configure the stderr and file sinks.

    Args:
        debug: Log at DEBUG level on stderr instead of INFO
        log_file: Also write a rotating log file under LOG_DIR
    """
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if debug else "INFO",
        backtrace=True,
        diagnose=debug,
    )

    if log_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / "relay.log",
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            format=FILE_FORMAT,
            level="DEBUG",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )


__all__ = ["logger", "LOG_DIR", "setup_logging"]
