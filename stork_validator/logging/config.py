"""
Centralized logging configuration for the validation client.

This module provides standardized logging configuration using structlog
for all components. Every account-scoped component logs through a logger
bound to its username so interleaved output from concurrent accounts stays
attributable.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=True),
    ]

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_account_logger(name: str, username: str) -> FilteringBoundLogger:
    """
    Get a logger bound to a single account.

    Args:
        name: Logger name (typically __name__)
        username: Account username added to every event

    Returns:
        Configured structlog logger carrying account context
    """
    return get_logger(name).bind(account=username)


def get_session_logger(name: str, username: str) -> FilteringBoundLogger:
    """
    Get a logger for session state transitions of one account.

    Args:
        name: Logger name (typically __name__)
        username: Account username added to every event

    Returns:
        Configured structlog logger for the token manager
    """
    return get_account_logger(name, username).bind(
        subsystem="session",
        audit_trail=True
    )


def log_session_transition(
    logger: FilteringBoundLogger,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a session state transition with standardized format.

    Args:
        logger: Structlog logger instance (already bound to the account)
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Session transition")
