"""
Centralized logging configuration for the written exam grader.

Provides Loguru sinks (human-readable or JSON) and module-bound loggers.
"""

import sys
from pathlib import Path
from typing import Optional
from loguru import logger


def setup_structured_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    serialize: bool = False
) -> None:
    """
    Configure logging with Loguru.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        serialize: Emit JSON records instead of formatted lines

    Returns:
        None (Loguru configures its own handlers)
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        serialize=serialize,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[module]} | {message}",
        level=level,
        backtrace=True,
        diagnose=False
    )

    # File handler (optional)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            serialize=True,
            level="DEBUG",    # Always debug to file
            rotation="10 MB",
            retention="30 days",
            compression="zip"
        )

    # Suppress noisy third-party loggers
    logger.disable("httpx")
    logger.disable("httpcore")
    logger.disable("google_genai")


def get_logger(name: str):
    """
    Get a logger for a specific module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance with module binding
    """
    return logger.bind(module=name)


# Records emitted before setup_structured_logging() still need extra[module]
logger.configure(extra={"module": "grader"})
