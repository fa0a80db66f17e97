"""
Structured Logging

Every workspace build logs one summary line, bound to a correlation ID
so that the normalization debug lines of the same build can be grouped.

The logger:
- Is configured once, at import, from LoggingSettings
- Never alters a computed value
- Falls back to local console rendering when JSON output is disabled
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finplan.config import get_settings


def _build_processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Minimum level name. Defaults to FINPLAN_LOG_LEVEL.
        json_output: Render JSON lines. Defaults to FINPLAN_LOG_JSON_OUTPUT.
    """
    log_settings = get_settings().logging
    level = (level or log_settings.level).upper()
    if json_output is None:
        json_output = log_settings.json_output

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=_build_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str = "finplan") -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given name."""
    return structlog.get_logger(name)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related log lines.

    Use this at the start of a workspace build and bind it
    with structlog.contextvars.bound_contextvars.
    """
    return uuid4()
