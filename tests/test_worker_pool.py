from __future__ import annotations

import threading
import time
from pathlib import Path

import allure
import pytest

from randoop_runner.orchestrator.models import JobDescriptor, JobOutcome, JobStatus
from randoop_runner.orchestrator.pool import WorkerPool
from randoop_runner.orchestrator.tracker import CompletionTracker

pytestmark = [
    allure.epic("Batch Orchestration"),
    allure.feature("Worker Pool"),
]


class _SleepingRunner:
    """Stand-in runner that records how many jobs overlap."""

    def __init__(self, delay: float = 0.05) -> None:
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.seen: list[str] = []
        self._lock = threading.Lock()

    def run(self, job: JobDescriptor) -> JobOutcome:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.seen.append(job.target_id)
        time.sleep(self.delay)
        with self._lock:
            self.active -= 1
        return JobOutcome.success(job.target_id, duration_seconds=self.delay)


class _RaisingRunner:
    def run(self, job: JobDescriptor) -> JobOutcome:
        raise RuntimeError(f"boom for {job.target_id}")


def _job(target_id: str) -> JobDescriptor:
    return JobDescriptor(
        target_id=target_id,
        command_tokens=("generator",),
        working_directory=Path("."),
        timeout_seconds=5,
    )


def test_pool_bounds_concurrency_and_queues_the_rest() -> None:
    runner = _SleepingRunner()
    tracker = CompletionTracker(12)
    outcomes: list[JobOutcome] = []
    lock = threading.Lock()

    def _sink(outcome: JobOutcome) -> None:
        with lock:
            outcomes.append(outcome)

    with WorkerPool(runner=runner, tracker=tracker, on_outcome=_sink, thread_count=3) as pool:
        for index in range(12):
            pool.submit(_job(f"com.example.C{index}"))
        assert tracker.wait(timeout=10) is True

    assert runner.max_active <= 3
    assert sorted(runner.seen) == sorted(f"com.example.C{index}" for index in range(12))
    assert len(outcomes) == 12
    assert {outcome.target_id for outcome in outcomes} == set(runner.seen)


def test_submit_does_not_block_on_busy_workers() -> None:
    runner = _SleepingRunner(delay=0.5)
    tracker = CompletionTracker(4)
    pool = WorkerPool(runner=runner, tracker=tracker, on_outcome=lambda _o: None, thread_count=1)

    started = time.monotonic()
    for index in range(4):
        pool.submit(_job(f"com.example.C{index}"))
    assert time.monotonic() - started < 0.4

    pool.shutdown()
    assert tracker.remaining == 0


def test_runner_exception_still_yields_an_outcome_and_a_mark() -> None:
    tracker = CompletionTracker(2)
    outcomes: list[JobOutcome] = []

    with WorkerPool(
        runner=_RaisingRunner(),
        tracker=tracker,
        on_outcome=outcomes.append,
        thread_count=2,
    ) as pool:
        pool.submit(_job("com.example.A"))
        pool.submit(_job("com.example.B"))
        assert tracker.wait(timeout=5) is True

    assert sorted(outcome.target_id for outcome in outcomes) == ["com.example.A", "com.example.B"]
    assert all(outcome.status == JobStatus.LAUNCH_FAILED for outcome in outcomes)
    assert all("Runner error" in (outcome.message or "") for outcome in outcomes)


def test_submit_after_shutdown_is_refused() -> None:
    pool = WorkerPool(
        runner=_SleepingRunner(),
        tracker=CompletionTracker(0),
        on_outcome=lambda _o: None,
        thread_count=1,
    )
    pool.shutdown()

    with pytest.raises(RuntimeError):
        pool.submit(_job("com.example.Late"))


def test_thread_count_must_be_positive() -> None:
    with pytest.raises(ValueError, match="thread_count"):
        WorkerPool(
            runner=_SleepingRunner(),
            tracker=CompletionTracker(0),
            on_outcome=lambda _o: None,
            thread_count=0,
        )
