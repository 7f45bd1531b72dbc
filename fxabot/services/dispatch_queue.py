"""
Dispatch queue for outbound work.

Webhook handlers schedule Jobs; a single consumer task receives them and
starts each one as its own asyncio task, so a slow job never holds up the
next. The tasks inside one job run strictly one after another, and the
first failure ends the job. Nothing is retried and nothing is reported
back to the webhook request, which has already been answered.
"""

import asyncio
from typing import Optional, Protocol, Set

from fxabot.models.job import GithubComment, Job, Task
from fxabot.services.github_client import GithubClientError
from fxabot.utils.logging import get_logger, log_job_transition

logger = get_logger(__name__)


class QueueClosedError(Exception):
    """Raised when a job is scheduled after the queue has been closed."""

    def __init__(self, job: Job):
        self.job = job
        super().__init__(f"dispatch queue is closed, job {job.job_id} not accepted")


class CommentClient(Protocol):
    async def github_comment(self, repo: str, issue: int, body: str) -> None: ...


class DispatchQueue:
    """Unbounded many-producer, single-consumer queue of Jobs."""

    def __init__(self, client: CommentClient):
        """
        Initialize the queue.

        Args:
            client: Outbound client shared by every job
        """
        self._client = client
        self._jobs: "asyncio.Queue[Job]" = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._running: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Jobs waiting to be picked up by the consumer."""
        return self._jobs.qsize()

    @property
    def running(self) -> int:
        """Jobs currently executing."""
        return len(self._running)

    def start(self) -> None:
        """
        Start the consumer task.

        Must be called from a running event loop.
        """
        if self._consumer is not None:
            raise RuntimeError("dispatch queue already started")
        if self._closed:
            raise RuntimeError("dispatch queue is closed")
        self._consumer = asyncio.create_task(self._process_jobs(), name="dispatch-queue")
        logger.info("Dispatch queue started")

    def schedule(self, job: Job) -> None:
        """
        Enqueue a job without waiting for it.

        Raises:
            QueueClosedError: If the queue has been closed
        """
        if self._closed:
            raise QueueClosedError(job)
        self._jobs.put_nowait(job)
        log_job_transition(logger, job.job_id, "scheduled", task_count=len(job.tasks))

    async def drain(self) -> None:
        """Wait until every job scheduled so far has finished running."""
        await self._jobs.join()
        while self._running:
            await asyncio.gather(*self._running, return_exceptions=True)

    async def close(self) -> None:
        """
        Stop accepting jobs, let in-flight jobs finish, stop the consumer.
        """
        if self._closed:
            return
        self._closed = True
        logger.info("Stopping dispatch queue...")

        if self._consumer is not None:
            await self.drain()
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass

        logger.info("Dispatch queue stopped")

    async def _process_jobs(self) -> None:
        """Receive jobs forever, spawning each without waiting for it."""
        while True:
            job = await self._jobs.get()
            try:
                self._spawn(job)
            finally:
                self._jobs.task_done()

    def _spawn(self, job: Job) -> None:
        task = asyncio.create_task(self._run_job(job), name=f"job-{job.job_id}")
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run_job(self, job: Job) -> None:
        """Run a job's tasks in order, stopping at the first failure."""
        job_logger = logger.with_context(job_id=job.job_id)
        log_job_transition(job_logger, job.job_id, "started", task_count=len(job.tasks))

        for index, task in enumerate(job.tasks):
            try:
                await self._run_task(task)
            except GithubClientError as e:
                job_logger.error(f"Task {index + 1}/{len(job.tasks)} failed: {e}")
                log_job_transition(job_logger, job.job_id, "failed")
                return
            except Exception as e:
                job_logger.error(
                    f"Task {index + 1}/{len(job.tasks)} raised unexpectedly: {e}",
                    exc_info=True,
                )
                log_job_transition(job_logger, job.job_id, "failed")
                return

        log_job_transition(job_logger, job.job_id, "completed")

    async def _run_task(self, task: Task) -> None:
        if isinstance(task, GithubComment):
            await self._client.github_comment(task.repo, task.issue, task.body)
        else:
            raise TypeError(f"unknown task type: {type(task).__name__}")
