"""Text rendering of batch reports for CLI output."""

from __future__ import annotations

from randoop_runner.orchestrator.models import BatchReport, JobOutcome, JobStatus


def render_report_lines(*, report: BatchReport, show_output: bool = False) -> list[str]:
    """Render one line per job plus a totals line."""

    lines = [_render_outcome(outcome) for outcome in report.sorted_outcomes()]
    if show_output:
        for outcome in report.sorted_outcomes():
            if outcome.ok or not outcome.output_tail:
                continue
            lines.append(f"Output tail for {outcome.target_id}:")
            lines.extend(f"  {line}" for line in outcome.output_tail.splitlines())

    lines.append(
        "Batch summary: "
        f"total={report.total} succeeded={report.succeeded} "
        f"non_zero_exit={report.by_status[JobStatus.NON_ZERO_EXIT]} "
        f"timed_out={report.by_status[JobStatus.TIMED_OUT]} "
        f"launch_failed={report.by_status[JobStatus.LAUNCH_FAILED]} "
        f"duration={report.duration_seconds:.1f}s",
    )
    lines.append(f"Batch status: {'passed' if report.ok else 'failed'}")
    return lines


def _render_outcome(outcome: JobOutcome) -> str:
    line = (
        f"target={outcome.target_id} status={outcome.status.value} "
        f"duration={outcome.duration_seconds:.1f}s"
    )
    if outcome.status == JobStatus.NON_ZERO_EXIT:
        return f"{line} exit_code={outcome.exit_code}"
    if outcome.message:
        return f"{line} reason={outcome.message}"
    return line
