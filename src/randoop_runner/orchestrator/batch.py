"""Fan a batch of per-class jobs out to a worker pool and join on completion."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from randoop_runner.orchestrator.models import BatchReport, JobDescriptor, JobOutcome
from randoop_runner.orchestrator.pool import WorkerPool
from randoop_runner.orchestrator.runner import JobExecutor, JobRunner
from randoop_runner.orchestrator.tracker import CompletionTracker

PerTargetTokens = Callable[[str], Sequence[str]]


class _OutcomeCollector:
    """Thread-safe sink keeping outcomes in completion order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[JobOutcome] = []

    def __call__(self, outcome: JobOutcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    def snapshot(self) -> tuple[JobOutcome, ...]:
        with self._lock:
            return tuple(self._outcomes)


def build_jobs(
    *,
    targets: Iterable[str],
    argument_template: Sequence[str],
    per_target: PerTargetTokens,
    working_directory: Path,
    timeout_seconds: int,
) -> list[JobDescriptor]:
    """Create one descriptor per distinct target, ordered by target id."""

    template = tuple(argument_template)
    return [
        JobDescriptor(
            target_id=target,
            command_tokens=template + tuple(per_target(target)),
            working_directory=working_directory,
            timeout_seconds=timeout_seconds,
        )
        for target in sorted(set(targets))
    ]


def run_batch(  # noqa: PLR0913
    *,
    targets: Iterable[str],
    argument_template: Sequence[str],
    per_target: PerTargetTokens,
    working_directory: Path,
    timeout_seconds: int,
    concurrency: int,
    runner: JobExecutor | None = None,
    logger: logging.Logger | None = None,
) -> BatchReport:
    """Run one job per target with at most ``concurrency`` processes at a time.

    Blocks until every job resolved (success, failure, timeout, or launch error)
    and returns the aggregated outcomes. Per-job failures are never raised.
    """

    log = logger if logger is not None else logging.getLogger(__name__)
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}.")

    jobs = build_jobs(
        targets=targets,
        argument_template=argument_template,
        per_target=per_target,
        working_directory=working_directory,
        timeout_seconds=timeout_seconds,
    )
    job_runner = runner if runner is not None else JobRunner(logger=log)
    tracker = CompletionTracker(len(jobs))
    collector = _OutcomeCollector()

    started = time.monotonic()
    log.info("Submitting %d job(s) with %d worker(s)", len(jobs), concurrency)
    pool = WorkerPool(
        runner=job_runner,
        tracker=tracker,
        on_outcome=collector,
        thread_count=concurrency,
        logger=log,
    )
    try:
        for job in jobs:
            pool.submit(job)
        tracker.wait()
    finally:
        pool.shutdown()

    report = BatchReport(
        outcomes=collector.snapshot(),
        duration_seconds=time.monotonic() - started,
    )
    log.info(
        "Batch done: total=%d succeeded=%d failed=%d in %.1fs",
        report.total,
        report.succeeded,
        report.failed,
        report.duration_seconds,
    )
    return report
