"""
Utility modules for fxabot.
"""

from fxabot.utils.logging import (
    ContextLoggerAdapter,
    JSONFormatter,
    get_logger,
    log_api_call,
    log_job_transition,
    log_webhook_event,
    setup_logging,
)

__all__ = [
    "ContextLoggerAdapter",
    "JSONFormatter",
    "get_logger",
    "setup_logging",
    "log_webhook_event",
    "log_job_transition",
    "log_api_call",
]
