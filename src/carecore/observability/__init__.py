"""
CareCore Observability Module

Structured logging configuration.
"""

from carecore.observability.logging import configure_logging, redaction_processor

__all__ = [
    "configure_logging",
    "redaction_processor",
]
