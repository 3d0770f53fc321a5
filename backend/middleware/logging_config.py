"""
Structured Logging Configuration

Uses structlog for JSON-formatted logs with correlation IDs.

Features:
- Correlation IDs per classification run (track one user's run across logs)
- JSON output (easily parseable by log aggregators)
- Automatic context injection (user_id, correlation_id)
- Collaborator call tracking (duration, success)
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

# ==================== Configuration ====================

def configure_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Configure structured logging for the engine.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON format. If False, use console format.
    """

    if json_logs:
        # JSON format for production
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer()
        ]
    else:
        # Console format for local development
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            structlog.dev.ConsoleRenderer()
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Standard library logging is used by the extractor modules
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        force=True,
    )


# ==================== Correlation Context ====================

@contextmanager
def classification_context(user_id: str, correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind user_id and a correlation ID for the duration of one classification run.

    Usage:
        with classification_context("u-123") as correlation_id:
            logger.info("profile_built")

    Yields:
        The correlation ID in effect for the run.
    """
    correlation_id = correlation_id or str(uuid.uuid4())
    tokens = structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id,
        user_id=user_id,
    )
    try:
        yield correlation_id
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


# ==================== Helper Functions ====================

def get_logger(name: str = None):
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("profile_built", user_id="u-123", bookings=4)
    """
    return structlog.get_logger(name)


def log_integration_call(integration: str, operation: str, duration: float, success: bool = True, error: str = None):
    """
    Log a call to an external collaborator (log source, trait provider, repository).

    Usage:
        log_integration_call("log_source", "fetch_event_log", duration=0.043)
    """
    logger = structlog.get_logger()

    if success:
        logger.info(
            "integration_call_completed",
            integration=integration,
            operation=operation,
            duration_seconds=round(duration, 3)
        )
    else:
        logger.error(
            "integration_call_failed",
            integration=integration,
            operation=operation,
            duration_seconds=round(duration, 3),
            error=error
        )


def log_business_event(event_type: str, **details):
    """
    Log a business-relevant event.

    Usage:
        log_business_event("travel_archetype_classified", archetype="Explorer", match_score=50)
    """
    logger = structlog.get_logger()
    logger.info("business_event", event_type=event_type, **details)
