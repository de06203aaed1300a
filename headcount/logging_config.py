"""Structured logging configuration using structlog.

JSON output for production log shipping, a colored console renderer for
development.

Usage::

    from headcount.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("report_submitted", company_id=12, report_month="2026-10-01")
    # Output: {"event": "report_submitted", "company_id": 12, "report_month": "2026-10-01", ...}
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure structured logging for the application.

    Args:
        json_logs: If True, output JSON format. If False, use human-readable format.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    common_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=common_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ of the module.

    Returns:
        Structured logger instance with bound context.
    """
    return structlog.get_logger(name)
