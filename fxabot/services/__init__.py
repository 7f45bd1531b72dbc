"""Business logic services package."""

from fxabot.services.commands import build_job, build_reply, find_mention, parse_command, parse_line
from fxabot.services.dispatch_queue import DispatchQueue, QueueClosedError
from fxabot.services.events import EventDecodeError, decode_comment_event, parse_event_kind
from fxabot.services.github_client import (
    GithubAPIError,
    GithubClient,
    GithubClientError,
    GithubTransportError,
)
from fxabot.services.signature import compute_signature, verify_signature

__all__ = [
    'verify_signature',
    'compute_signature',
    'EventDecodeError',
    'parse_event_kind',
    'decode_comment_event',
    'parse_command',
    'find_mention',
    'parse_line',
    'build_reply',
    'build_job',
    'DispatchQueue',
    'QueueClosedError',
    'GithubClient',
    'GithubClientError',
    'GithubAPIError',
    'GithubTransportError',
]
