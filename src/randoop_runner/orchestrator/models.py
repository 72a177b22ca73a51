"""Domain models for per-class generation jobs and their outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class JobStatus(str, Enum):
    """Terminal job states."""

    SUCCESS = "success"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMED_OUT = "timed_out"
    LAUNCH_FAILED = "launch_failed"


@dataclass(frozen=True, slots=True)
class JobDescriptor:
    """One unit of work: a generator invocation for a single target class."""

    target_id: str
    command_tokens: tuple[str, ...]
    working_directory: Path
    timeout_seconds: int

    def __post_init__(self) -> None:
        if not self.target_id:
            raise ValueError("Job target_id must not be empty.")
        if not self.command_tokens:
            raise ValueError(f"Job {self.target_id} has an empty command line.")
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"Job {self.target_id} timeout_seconds must be > 0, got {self.timeout_seconds}.",
            )

    @property
    def command_line(self) -> str:
        return " ".join(self.command_tokens)


@dataclass(frozen=True, slots=True)
class JobOutcome:
    """Terminal classification of one job."""

    target_id: str
    status: JobStatus
    duration_seconds: float
    exit_code: int | None = None
    message: str | None = None
    output_tail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == JobStatus.SUCCESS

    @classmethod
    def success(
        cls,
        target_id: str,
        *,
        duration_seconds: float,
        output_tail: str = "",
    ) -> JobOutcome:
        return cls(
            target_id=target_id,
            status=JobStatus.SUCCESS,
            duration_seconds=duration_seconds,
            exit_code=0,
            output_tail=output_tail,
        )

    @classmethod
    def non_zero_exit(
        cls,
        target_id: str,
        *,
        exit_code: int,
        duration_seconds: float,
        output_tail: str = "",
    ) -> JobOutcome:
        return cls(
            target_id=target_id,
            status=JobStatus.NON_ZERO_EXIT,
            duration_seconds=duration_seconds,
            exit_code=exit_code,
            output_tail=output_tail,
        )

    @classmethod
    def timed_out(
        cls,
        target_id: str,
        *,
        deadline_seconds: float,
        duration_seconds: float,
        output_tail: str = "",
    ) -> JobOutcome:
        return cls(
            target_id=target_id,
            status=JobStatus.TIMED_OUT,
            duration_seconds=duration_seconds,
            message=f"Process still running after {deadline_seconds:g}s deadline.",
            output_tail=output_tail,
        )

    @classmethod
    def launch_failed(cls, target_id: str, *, message: str, duration_seconds: float) -> JobOutcome:
        return cls(
            target_id=target_id,
            status=JobStatus.LAUNCH_FAILED,
            duration_seconds=duration_seconds,
            message=message,
        )


@dataclass(frozen=True, slots=True)
class BatchReport:
    """Aggregate of every outcome produced by one batch, in completion order."""

    outcomes: tuple[JobOutcome, ...] = ()
    duration_seconds: float = 0.0
    by_status: dict[JobStatus, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        counts = dict.fromkeys(JobStatus, 0)
        for outcome in self.outcomes:
            counts[outcome.status] += 1
        object.__setattr__(self, "by_status", counts)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return self.by_status[JobStatus.SUCCESS]

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def ok(self) -> bool:
        """True when no outcome is a failure of any kind."""
        return self.failed == 0

    @property
    def target_ids(self) -> frozenset[str]:
        return frozenset(outcome.target_id for outcome in self.outcomes)

    def sorted_outcomes(self) -> list[JobOutcome]:
        return sorted(self.outcomes, key=lambda outcome: outcome.target_id)
