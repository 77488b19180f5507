"""
Structured logging configuration using structlog.

All logs are output as JSON with consistent context fields.
"""
import structlog
import logging
import sys

from app.config import settings


def configure_logging(level: str = "INFO"):
    """Configure structlog for JSON output with context."""

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


# Create logger instance
logger = configure_logging(settings.LOG_LEVEL)


def get_logger(**context):
    """
    Get a logger with additional context bound.

    Usage:
        log = get_logger(user_id=user_id)
        log.info("message", extra_field=value)
    """
    return logger.bind(**context)
