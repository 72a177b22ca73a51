"""Controllers for generation CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TypeVar

from randoop_runner.arguments import (
    build_argument_template,
    build_runtime_classpath,
    per_target_tokens,
)
from randoop_runner.config import Settings
from randoop_runner.discovery import ClassFinder
from randoop_runner.orchestrator import JobRunner, render_report_lines, run_batch

_T = TypeVar("_T")


@dataclass(slots=True)
class GenerationOverrides:
    """CLI values that take precedence over environment settings."""

    package_name: str | None = None
    classes_dir: Path | None = None
    output_dir: Path | None = None
    classpath: tuple[Path, ...] = ()
    generator_jar: Path | None = None
    extra_parameters: str | None = None
    working_directory: Path | None = None
    java_executable: str | None = None


@dataclass(slots=True)
class GenTestsCommand:
    """CLI input for a generation batch."""

    overrides: GenerationOverrides = field(default_factory=GenerationOverrides)
    timeout_seconds: int | None = None
    thread_count: int | None = None
    grace_seconds: float | None = None
    allow_failures: bool = False
    show_output: bool = False


@dataclass(slots=True)
class DiscoverCommand:
    """CLI input for class discovery only."""

    overrides: GenerationOverrides = field(default_factory=GenerationOverrides)


@dataclass(slots=True)
class GenTestsResult:
    """Batch report to render in CLI."""

    lines: list[str]
    success: bool


class GenerationCliController:
    """Coordinates discovery, argument building, and the job batch."""

    def __init__(self, *, finder: ClassFinder | None = None) -> None:
        self._finder = finder or ClassFinder()

    def discover(self, command: DiscoverCommand) -> list[str]:
        settings = _resolve_settings(command.overrides)
        targets = self._finder.find(settings.package_name, settings.discovery_roots())
        lines = sorted(targets)
        lines.append(f"Discovered classes: {len(targets)}")
        return lines

    def gentests(self, command: GenTestsCommand) -> GenTestsResult:
        settings = _resolve_settings(
            command.overrides,
            timeout_seconds=command.timeout_seconds,
            thread_count=command.thread_count,
            grace_seconds=command.grace_seconds,
            allow_failures=command.allow_failures,
        )
        targets = self._finder.find(settings.package_name, settings.discovery_roots())
        classpath = build_runtime_classpath(settings)
        template = build_argument_template(settings, classpath)
        execution = settings.execution

        report = run_batch(
            targets=targets,
            argument_template=template,
            per_target=per_target_tokens,
            working_directory=settings.working_directory,
            timeout_seconds=execution.timeout_seconds,
            concurrency=execution.thread_count,
            runner=JobRunner(
                grace_seconds=execution.grace_seconds,
                output_tail_lines=execution.output_tail_lines,
            ),
        )
        lines = render_report_lines(report=report, show_output=command.show_output)
        return GenTestsResult(lines=lines, success=report.ok or execution.allow_failures)


def _resolve_settings(
    overrides: GenerationOverrides,
    *,
    timeout_seconds: int | None = None,
    thread_count: int | None = None,
    grace_seconds: float | None = None,
    allow_failures: bool = False,
) -> Settings:
    settings = Settings.from_env()
    execution = settings.execution
    settings = replace(
        settings,
        package_name=overrides.package_name or settings.package_name,
        classes_dir=overrides.classes_dir or settings.classes_dir,
        output_dir=overrides.output_dir or settings.output_dir,
        classpath=overrides.classpath or settings.classpath,
        generator_jar=overrides.generator_jar or settings.generator_jar,
        extra_parameters=overrides.extra_parameters or settings.extra_parameters,
        working_directory=overrides.working_directory or settings.working_directory,
        java_executable=overrides.java_executable or settings.java_executable,
        execution=replace(
            execution,
            timeout_seconds=_pick(timeout_seconds, execution.timeout_seconds),
            thread_count=_pick(thread_count, execution.thread_count),
            grace_seconds=_pick(grace_seconds, execution.grace_seconds),
            allow_failures=allow_failures or execution.allow_failures,
        ),
    )
    settings.validate()
    return settings


def _pick(override: _T | None, default: _T) -> _T:
    return override if override is not None else default
