"""Dispatch job and task models."""

import uuid
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field


class GithubComment(BaseModel):
    """Post `body` as a comment on issue `issue` of repository `repo`."""

    model_config = ConfigDict(frozen=True)

    repo: str
    issue: int
    body: str


# Closed union of everything a job can do; extend alongside DispatchQueue._run_task
Task = Union[GithubComment]


class Job(BaseModel):
    """Ordered batch of tasks produced by one webhook event."""

    job_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    tasks: List[Task] = []

    def comment(self, repo: str, issue: int, body: str) -> None:
        self.tasks.append(GithubComment(repo=repo, issue=issue, body=body))
