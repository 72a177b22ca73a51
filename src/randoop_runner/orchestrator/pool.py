"""Bounded worker pool that runs jobs and reports completion to a tracker."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType

from randoop_runner.orchestrator.models import JobDescriptor, JobOutcome
from randoop_runner.orchestrator.runner import JobExecutor
from randoop_runner.orchestrator.tracker import CompletionTracker

OutcomeSink = Callable[[JobOutcome], None]


class WorkerPool:
    """Fixed number of worker threads pulling jobs from an unbounded queue.

    Submission never blocks and is never rejected for capacity. Each job produces
    one outcome for ``on_outcome`` and one ``tracker.mark_one()`` call.
    """

    def __init__(
        self,
        *,
        runner: JobExecutor,
        tracker: CompletionTracker,
        on_outcome: OutcomeSink,
        thread_count: int,
        logger: logging.Logger | None = None,
    ) -> None:
        if thread_count < 1:
            raise ValueError(f"thread_count must be >= 1, got {thread_count}.")
        self.thread_count = thread_count
        self._runner = runner
        self._tracker = tracker
        self._on_outcome = on_outcome
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._executor = ThreadPoolExecutor(
            max_workers=thread_count,
            thread_name_prefix="randoop-worker",
        )

    def submit(self, job: JobDescriptor) -> None:
        """Queue ``job``; raises ``RuntimeError`` once the pool is shut down."""

        self._executor.submit(self._execute, job)

    def shutdown(self) -> None:
        """Stop accepting jobs and wait for in-flight ones to finish on their own."""

        self._executor.shutdown(wait=True)

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.shutdown()

    def _execute(self, job: JobDescriptor) -> None:
        started = time.monotonic()
        try:
            outcome = self._runner.run(job)
        except Exception as error:
            self._logger.exception("[%s] Runner raised unexpectedly", job.target_id)
            outcome = JobOutcome.launch_failed(
                job.target_id,
                message=f"Runner error: {error}",
                duration_seconds=time.monotonic() - started,
            )
        try:
            self._on_outcome(outcome)
        finally:
            self._tracker.mark_one()
