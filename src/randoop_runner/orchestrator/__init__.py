"""Concurrent per-class generator invocation.

A batch turns every discovered target class into one :class:`JobDescriptor`,
runs the descriptors on a fixed-size thread pool, and joins on a countdown
:class:`CompletionTracker`. Per-job failures (non-zero exit, timeout, launch
error) come back as :class:`JobOutcome` values inside the :class:`BatchReport`;
deciding whether they fail the build is left to the caller.
"""

from randoop_runner.orchestrator.batch import build_jobs, run_batch
from randoop_runner.orchestrator.models import BatchReport, JobDescriptor, JobOutcome, JobStatus
from randoop_runner.orchestrator.pool import WorkerPool
from randoop_runner.orchestrator.report import render_report_lines
from randoop_runner.orchestrator.runner import JobExecutor, JobRunner
from randoop_runner.orchestrator.tracker import CompletionTracker, TrackerMisuseError

__all__ = [
    "BatchReport",
    "CompletionTracker",
    "JobDescriptor",
    "JobOutcome",
    "JobExecutor",
    "JobRunner",
    "JobStatus",
    "TrackerMisuseError",
    "WorkerPool",
    "build_jobs",
    "render_report_lines",
    "run_batch",
]
