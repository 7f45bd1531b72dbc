"""
Shared fixtures for unit tests.
"""

import json
import os
from typing import Any, Callable, Dict, List, Tuple

import pytest

from fxabot.config import GithubSettings, Settings
from fxabot.models.event import CommentEvent
from fxabot.models.job import Job
from fxabot.services.dispatch_queue import QueueClosedError


def make_payload(
    body: str = "@bot ping",
    action: str = "created",
    sender: str = "alice",
    repo: str = "mozilla/fxa",
    issue: int = 42,
) -> Dict[str, Any]:
    """Build an issue_comment webhook payload shaped like GitHub's."""
    return {
        "action": action,
        "issue": {"number": issue, "title": "Login page is broken"},
        "comment": {"id": 1001, "body": body, "user": {"login": sender}},
        "repository": {"full_name": repo, "private": False},
        "sender": {"login": sender, "type": "User"},
    }


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep a developer's FXABOT_* variables and .env file out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("FXABOT_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def payload_factory() -> Callable[..., Dict[str, Any]]:
    return make_payload


@pytest.fixture
def event_factory() -> Callable[..., CommentEvent]:
    def factory(**kwargs: Any) -> CommentEvent:
        return CommentEvent.model_validate_json(json.dumps(make_payload(**kwargs)))
    return factory


@pytest.fixture
def settings() -> Settings:
    """Bot named 'bot' that trusts alice and has no webhook secret."""
    return Settings(github=GithubSettings(username="bot", authorized=["alice"]))


class RecordingClient:
    """Stand-in GitHub client that records calls in order."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, int, str]] = []
        self.closed = False

    async def github_comment(self, repo: str, issue: int, body: str) -> None:
        self.calls.append(("comment", repo, issue, body))

    async def close(self) -> None:
        self.closed = True


class RecordingQueue:
    """Stand-in dispatch queue that keeps scheduled jobs instead of running them."""

    def __init__(self, closed: bool = False) -> None:
        self.jobs: List[Job] = []
        self.closed = closed

    def schedule(self, job: Job) -> None:
        if self.closed:
            raise QueueClosedError(job)
        self.jobs.append(job)


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def recording_queue() -> RecordingQueue:
    return RecordingQueue()
