"""
Centralized logging configuration for the application.
"""
import logging
import sys
from content_ingest.core.config import settings


# Libraries that log every request/parse at INFO or DEBUG
NOISY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3", "multipart", "python_multipart")


def resolve_level(level_name: str) -> int:
    """Map a level name from settings to a logging level; unknown names fall back to INFO."""
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level_name: str = settings.log_level):
    """Configure the ``content_ingest`` logger and quiet third-party loggers."""

    level = resolve_level(level_name)
    logger = logging.getLogger("content_ingest")
    logger.setLevel(level)
    # Upload logs go to our handler only, not twice via the root logger
    logger.propagate = False

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger


# Global logger instance
logger = setup_logging()
