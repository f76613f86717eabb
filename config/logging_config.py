"""Structured JSON logging configuration using structlog."""

import logging
import sys

import structlog

SERVICE_NAME = "milkosense-trends"

_configured_level: int | None = None


def configure_logging(component: str, level: str = "INFO") -> structlog.BoundLogger:
    """
    Configure structlog with JSON output and return a logger bound to the component.

    Components are created in any order (engine, store, API), so the processor
    chain is only rebuilt when the requested level actually changes.
    """
    global _configured_level

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if _configured_level != numeric_level:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.dev.set_exc_info,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
            cache_logger_on_first_use=False,
        )
        _configured_level = numeric_level
    return structlog.get_logger(service=SERVICE_NAME, component=component)
