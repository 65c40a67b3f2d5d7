"""
Structured Logging

Features:
- JSON or console rendered logs
- Log levels from settings
- Redaction of signature images and free-text clinical notes
"""

import logging
import sys
from typing import Any

import structlog

from carecore.config import get_settings

# Event keys that may carry PHI or signature images
REDACTED_KEYS = frozenset({
    "signature_data",
    "completion_note",
    "skip_note",
    "issue_description",
    "assessment_summary",
    "content",
})

REDACTED = "[REDACTED]"


def redaction_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Redact sensitive values from log events."""
    for key in REDACTED_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structlog for the process.

    Args:
        level: Log level name, defaults to settings
        json_output: Render JSON instead of console output; defaults to the
            `log_json` setting, or to JSON in production when that is unset
    """
    settings = get_settings()
    level = (level or settings.app.log_level).upper()
    if json_output is None:
        json_output = settings.is_production if settings.app.log_json is None else settings.app.log_json

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level, logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redaction_processor,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
