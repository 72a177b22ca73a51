"""Subprocess runner for one generation job."""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections import deque
from typing import IO, Protocol

from randoop_runner.orchestrator.models import JobDescriptor, JobOutcome

logger = logging.getLogger(__name__)

DEFAULT_GRACE_SECONDS = 10.0
DEFAULT_OUTPUT_TAIL_LINES = 20
_TERMINATE_WAIT_SECONDS = 0.5
_KILL_WAIT_SECONDS = 1.0
_OUTPUT_DRAIN_SECONDS = 0.5


class JobExecutor(Protocol):
    """Protocol implemented by job runners."""

    def run(self, job: JobDescriptor) -> JobOutcome:
        """Execute one job and return its terminal outcome."""


class _OutputTail:
    """Last lines of a process output, filled by a reader thread."""

    def __init__(self, max_lines: int) -> None:
        self._lock = threading.Lock()
        self._lines: deque[str] = deque(maxlen=max_lines)

    def append(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    def text(self) -> str:
        with self._lock:
            return "\n".join(self._lines)


class JobRunner:
    """Launch a job's command, enforce its deadline, and classify the result.

    Every code path returns a :class:`JobOutcome`; launch problems are reported as
    ``launch_failed`` rather than raised. The outcome is decided by the process
    itself exiting, not by its output pipe closing.
    """

    def __init__(
        self,
        *,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
        output_tail_lines: int = DEFAULT_OUTPUT_TAIL_LINES,
        logger: logging.Logger | None = None,
    ) -> None:
        if grace_seconds < 0:
            raise ValueError(f"grace_seconds must be >= 0, got {grace_seconds}.")
        self.grace_seconds = grace_seconds
        self.output_tail_lines = max(0, output_tail_lines)
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def deadline_for(self, job: JobDescriptor) -> float:
        return job.timeout_seconds + self.grace_seconds

    def run(self, job: JobDescriptor) -> JobOutcome:
        deadline = self.deadline_for(job)
        self._log(logging.INFO, "[%s] STARTS (time limit %ss)", job.target_id, job.timeout_seconds)
        self._log(logging.DEBUG, "[%s] Command: %s", job.target_id, job.command_line)

        start_monotonic = time.monotonic()
        try:
            process = subprocess.Popen(  # noqa: S603
                list(job.command_tokens),
                cwd=str(job.working_directory),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        except (OSError, ValueError) as error:
            outcome = JobOutcome.launch_failed(
                job.target_id,
                message=f"Failed to start process: {error}",
                duration_seconds=time.monotonic() - start_monotonic,
            )
            self._log(logging.ERROR, "[%s] Launch failed: %s", job.target_id, outcome.message)
            return outcome

        tail = _OutputTail(self.output_tail_lines)
        reader = threading.Thread(
            target=_drain_output,
            args=(process.stdout, tail),
            name=f"randoop-output-{process.pid}",
            daemon=True,
        )
        reader.start()

        try:
            returncode = process.wait(timeout=deadline)
        except subprocess.TimeoutExpired:
            _terminate_process(process)
            duration = time.monotonic() - start_monotonic
            # Once killed, the pipe closes unless a grandchild still holds it.
            reader.join(timeout=_OUTPUT_DRAIN_SECONDS)
            outcome = JobOutcome.timed_out(
                job.target_id,
                deadline_seconds=deadline,
                duration_seconds=duration,
                output_tail=tail.text(),
            )
            self._log(logging.ERROR, "[%s] Timed out: %s", job.target_id, outcome.message)
            return outcome

        duration = time.monotonic() - start_monotonic
        # A background process started by the job may keep the pipe open; its
        # output is not waited for.
        reader.join(timeout=_OUTPUT_DRAIN_SECONDS)
        if returncode == 0:
            outcome = JobOutcome.success(
                job.target_id,
                duration_seconds=duration,
                output_tail=tail.text(),
            )
            self._log(logging.INFO, "[%s] Completed in %.1fs", job.target_id, duration)
            return outcome

        outcome = JobOutcome.non_zero_exit(
            job.target_id,
            exit_code=returncode,
            duration_seconds=duration,
            output_tail=tail.text(),
        )
        self._log(
            logging.ERROR,
            "[%s] Failed to generate tests, exit code=%d",
            job.target_id,
            returncode,
        )
        return outcome

    def _log(self, level: int, message: str, *args: object) -> None:
        """Best-effort progress logging: handler failures never change an outcome."""
        try:
            self._logger.log(level, message, *args)
        except Exception:  # noqa: BLE001
            # Progress line is dropped.
            return


def _drain_output(stream: IO[str] | None, tail: _OutputTail) -> None:
    if stream is None:
        return
    with stream:
        for line in stream:
            tail.append(line.rstrip("\r\n"))


def _terminate_process(process: subprocess.Popen[str]) -> None:
    """Stop a process that outlived its deadline within a short fixed window."""

    try:
        process.terminate()
    except OSError:
        return
    try:
        process.wait(timeout=_TERMINATE_WAIT_SECONDS)
    except subprocess.TimeoutExpired:
        try:
            process.kill()
        except OSError:
            return
        try:
            process.wait(timeout=_KILL_WAIT_SECONDS)
        except subprocess.TimeoutExpired:
            logger.warning("Process %s did not exit after kill", process.pid)
