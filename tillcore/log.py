"""structlog setup shared by every sale component."""

import logging

import structlog


def configure_logging(level: int = logging.INFO) -> None:
    """Render log events as JSON lines with an ISO timestamp and level."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def get_logger(**context):
    """Lazy logger carrying ``context``; picks up later ``configure_logging`` calls."""
    return structlog.get_logger(**context)
