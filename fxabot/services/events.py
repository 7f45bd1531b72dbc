"""
Webhook event decoding.

Turns the X-GitHub-Event header and the raw request body into a typed
CommentEvent.
"""

from typing import Optional

from pydantic import ValidationError

from fxabot.models.event import CommentEvent, EventKind
from fxabot.utils.logging import get_logger

logger = get_logger(__name__)

EVENT_HEADER = "X-GitHub-Event"


class EventDecodeError(Exception):
    """Raised when a webhook request does not carry a usable event."""
    pass


def parse_event_kind(value: Optional[str]) -> EventKind:
    """
    Parse the X-GitHub-Event header.

    Raises:
        EventDecodeError: If the header is missing or names an event the
            bot does not handle
    """
    if value is None:
        raise EventDecodeError(f"missing {EVENT_HEADER} header")
    try:
        return EventKind(value)
    except ValueError:
        raise EventDecodeError(f"unsupported event kind: {value!r}") from None


def decode_comment_event(payload: bytes) -> CommentEvent:
    """
    Deserialize an issue_comment webhook body.

    Raises:
        EventDecodeError: If the body is not JSON or lacks required fields
    """
    try:
        event = CommentEvent.model_validate_json(payload)
    except ValidationError as e:
        logger.error(f"Error decoding issue_comment payload: {e}")
        raise EventDecodeError("invalid issue_comment payload") from e

    logger.debug(f"Decoded event: {event!r}")
    return event
