"""Data models for fxabot."""

from .api_response import WebhookResponse
from .command import Command
from .event import (
    Comment,
    CommentAction,
    CommentEvent,
    EventKind,
    Issue,
    Repository,
    User,
)
from .job import GithubComment, Job, Task

__all__ = [
    # Webhook event models
    "EventKind",
    "CommentAction",
    "CommentEvent",
    "Comment",
    "Issue",
    "Repository",
    "User",
    # Command models
    "Command",
    # Dispatch models
    "Job",
    "Task",
    "GithubComment",
    # API response models
    "WebhookResponse",
]
