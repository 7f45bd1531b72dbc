"""
Structured logging utilities with JSON formatting and context injection.

This module provides:
- JSON formatted log output for machine-readable logs
- Context injection (delivery_id, job_id, repository, issue) via LoggerAdapter
- Helpers that log webhook events, job transitions and GitHub API calls
  with a consistent set of fields
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict, MutableMapping, Optional

# Fields promoted to the top level of every JSON record
CONTEXT_FIELDS = ("request_id", "delivery_id", "job_id", "repository", "issue")

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - request_id / delivery_id / job_id / repository / issue when present
    - context: any other extra fields
    - error: exception details when exc_info is set
    """

    def format(self, record: LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and key not in CONTEXT_FIELDS
        }
        if extra_fields:
            log_data["context"] = extra_fields

        if record.exc_info:
            log_data["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack_trace": "".join(traceback.format_exception(*record.exc_info)),
            }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.

    Per-call `extra` values win over the adapter's own context so a job
    logger can still tag an individual record with a different issue.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        new_extra = dict(self.extra)
        new_extra.update(context)
        return ContextLoggerAdapter(self.logger, new_extra)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Installs a JSON formatted stdout handler on the root logger and quiets
    the HTTP libraries, whose per-request logs duplicate our own.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level = log_level.upper()
    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Example:
        logger = get_logger(__name__, job_id="3f9c2a1b7d4e")
        logger.info("Running task")  # Will include job_id
    """
    return ContextLoggerAdapter(logging.getLogger(name), context)


def log_webhook_event(
    logger: logging.LoggerAdapter,
    event_kind: str,
    action: str,
    repository: str,
    issue: int,
    delivery_id: Optional[str] = None,
) -> None:
    """Log a decoded webhook event with the fields operators search by."""
    extra: Dict[str, Any] = {
        "event_kind": event_kind,
        "action": action,
        "repository": repository,
        "issue": issue,
    }
    if delivery_id is not None:
        extra["delivery_id"] = delivery_id
    logger.info(f"Webhook event received: {event_kind}.{action}", extra=extra)


def log_job_transition(
    logger: logging.LoggerAdapter,
    job_id: str,
    status: str,
    task_count: Optional[int] = None,
) -> None:
    """
    Log a dispatch job state change.

    Args:
        logger: Logger to use
        job_id: Job identifier
        status: 'scheduled', 'started', 'completed' or 'failed'
        task_count: Number of tasks in the job (if known)
    """
    extra: Dict[str, Any] = {"job_id": job_id, "status": status}
    if task_count is not None:
        extra["task_count"] = task_count

    if status == "failed":
        logger.warning(f"Job {status}: {job_id}", extra=extra)
    else:
        logger.info(f"Job {status}: {job_id}", extra=extra)


def log_api_call(
    logger: logging.LoggerAdapter,
    service: str,
    endpoint: str,
    method: str,
    status_code: Optional[int] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
) -> None:
    """
    Log an outbound API call with request/response details.

    Args:
        logger: Logger to use
        service: Service name (e.g., 'github')
        endpoint: API endpoint
        method: HTTP method
        status_code: Response status code (if available)
        duration_ms: Request duration in milliseconds (if available)
        error: Error message (if request failed)
    """
    extra: Dict[str, Any] = {
        "service": service,
        "endpoint": endpoint,
        "method": method,
    }

    if status_code is not None:
        extra["status_code"] = status_code
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
    if error is not None:
        extra["error"] = error

    if error:
        logger.error(f"API call failed: {method} {endpoint}", extra=extra)
    else:
        logger.info(f"API call: {method} {endpoint}", extra=extra)
