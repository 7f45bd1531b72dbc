"""GitHub issue comment webhook data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class EventKind(str, Enum):
    """Values of the X-GitHub-Event header the bot handles."""

    ISSUE_COMMENT = "issue_comment"


class CommentAction(str, Enum):
    """What happened to the comment."""

    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class User(_Frozen):
    login: str


class Comment(_Frozen):
    body: str
    user: User


class Issue(_Frozen):
    number: StrictInt = Field(ge=1)
    title: Optional[str] = None


class Repository(_Frozen):
    full_name: str


class CommentEvent(_Frozen):
    """Issue comment event delivered by a GitHub webhook."""

    action: CommentAction
    comment: Comment
    issue: Issue
    repository: Repository
    sender: User
