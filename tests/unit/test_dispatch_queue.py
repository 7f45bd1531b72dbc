"""
Unit tests for the dispatch queue.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Set, Tuple

import pytest

from fxabot.models.job import Job
from fxabot.services.dispatch_queue import DispatchQueue, QueueClosedError
from fxabot.services.github_client import GithubAPIError


class GatedClient:
    """Client whose calls can be held open and made to fail, by comment body."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.fail: Set[str] = set()
        self.crash: Set[str] = set()

    def gate(self, body: str) -> asyncio.Event:
        self.gates[body] = asyncio.Event()
        return self.gates[body]

    async def github_comment(self, repo: str, issue: int, body: str) -> None:
        self.calls.append(("start", body))
        if body in self.gates:
            await self.gates[body].wait()
        if body in self.fail:
            self.calls.append(("fail", body))
            raise GithubAPIError.unexpected_status("github comment", 500)
        if body in self.crash:
            raise RuntimeError("client blew up")
        self.calls.append(("end", body))


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def poll():
        while not predicate():
            await asyncio.sleep(0.005)
    await asyncio.wait_for(poll(), timeout)


def make_job(*bodies: str) -> Job:
    job = Job()
    for body in bodies:
        job.comment("mozilla/fxa", 42, body)
    return job


@pytest.mark.asyncio
async def test_job_tasks_run_in_order():
    client = GatedClient()
    first = client.gate("t1")
    queue = DispatchQueue(client)
    queue.start()

    queue.schedule(make_job("t1", "t2", "t3"))
    await wait_until(lambda: ("start", "t1") in client.calls)
    for _ in range(10):
        await asyncio.sleep(0)

    # t2 must not begin while t1 is still in flight
    assert ("start", "t2") not in client.calls

    first.set()
    await queue.drain()

    assert client.calls == [
        ("start", "t1"), ("end", "t1"),
        ("start", "t2"), ("end", "t2"),
        ("start", "t3"), ("end", "t3"),
    ]
    await queue.close()


@pytest.mark.asyncio
async def test_slow_job_does_not_block_later_jobs():
    client = GatedClient()
    slow = client.gate("slow")
    queue = DispatchQueue(client)
    queue.start()

    queue.schedule(make_job("slow"))
    queue.schedule(make_job("fast"))

    await wait_until(lambda: ("end", "fast") in client.calls and queue.running == 1)
    assert ("start", "slow") in client.calls
    assert ("end", "slow") not in client.calls

    slow.set()
    await queue.drain()

    assert ("end", "slow") in client.calls
    assert queue.running == 0
    await queue.close()


@pytest.mark.asyncio
async def test_failed_task_ends_its_job_only():
    client = GatedClient()
    client.fail.add("t1")
    queue = DispatchQueue(client)
    queue.start()

    queue.schedule(make_job("t1", "t2", "t3"))
    queue.schedule(make_job("other"))
    await queue.drain()

    assert ("start", "t2") not in client.calls
    assert ("start", "t3") not in client.calls
    assert client.calls.count(("start", "t1")) == 1  # never retried
    assert ("end", "other") in client.calls

    queue.schedule(make_job("after"))
    await queue.drain()
    assert ("end", "after") in client.calls
    await queue.close()


@pytest.mark.asyncio
async def test_unexpected_task_error_is_logged_and_contained(caplog):
    client = GatedClient()
    client.crash.add("boom")
    queue = DispatchQueue(client)
    queue.start()

    with caplog.at_level(logging.ERROR, logger="fxabot.services.dispatch_queue"):
        queue.schedule(make_job("boom", "never"))
        await queue.drain()

    assert ("start", "never") not in client.calls
    assert any("raised unexpectedly" in r.getMessage() for r in caplog.records)

    queue.schedule(make_job("still-alive"))
    await queue.drain()
    assert ("end", "still-alive") in client.calls
    await queue.close()


@pytest.mark.asyncio
async def test_task_failure_is_logged(caplog):
    client = GatedClient()
    client.fail.add("t1")
    queue = DispatchQueue(client)
    queue.start()

    with caplog.at_level(logging.WARNING, logger="fxabot.services.dispatch_queue"):
        job = make_job("t1")
        queue.schedule(job)
        await queue.drain()

    messages = [r.getMessage() for r in caplog.records]
    assert any("Task 1/1 failed" in m for m in messages)
    assert any(m == f"Job failed: {job.job_id}" for m in messages)
    await queue.close()


@pytest.mark.asyncio
async def test_jobs_scheduled_before_start_are_buffered():
    client = GatedClient()
    queue = DispatchQueue(client)

    for i in range(100):
        queue.schedule(make_job(f"job-{i}"))
    assert queue.pending == 100
    assert client.calls == []

    queue.start()
    await queue.drain()

    assert queue.pending == 0
    assert sorted(b for kind, b in client.calls if kind == "end") == sorted(f"job-{i}" for i in range(100))
    await queue.close()


@pytest.mark.asyncio
async def test_schedule_after_close_fails():
    queue = DispatchQueue(GatedClient())
    queue.start()
    await queue.close()

    job = make_job("late")
    with pytest.raises(QueueClosedError) as exc_info:
        queue.schedule(job)

    assert exc_info.value.job is job
    assert queue.closed


@pytest.mark.asyncio
async def test_close_waits_for_running_jobs():
    client = GatedClient()
    gate = client.gate("in-flight")
    queue = DispatchQueue(client)
    queue.start()

    queue.schedule(make_job("in-flight"))
    await wait_until(lambda: ("start", "in-flight") in client.calls)

    closing = asyncio.create_task(queue.close())
    await asyncio.sleep(0.01)
    assert not closing.done()
    with pytest.raises(QueueClosedError):
        queue.schedule(make_job("rejected"))

    gate.set()
    await asyncio.wait_for(closing, 2.0)

    assert ("end", "in-flight") in client.calls
    assert ("start", "rejected") not in client.calls


@pytest.mark.asyncio
async def test_close_is_idempotent_and_start_only_once():
    queue = DispatchQueue(GatedClient())
    queue.start()
    with pytest.raises(RuntimeError):
        queue.start()

    await queue.close()
    await queue.close()

    with pytest.raises(RuntimeError):
        queue.start()
