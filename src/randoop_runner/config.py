"""Runtime configuration for class discovery and test generation."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

_PACKAGE_NAME_RE = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


@dataclass(slots=True)
class ExecutionSettings:
    """Per-job limits and worker pool sizing."""

    timeout_seconds: int = 30
    thread_count: int = 1
    grace_seconds: float = 10.0
    output_tail_lines: int = 20
    allow_failures: bool = False


@dataclass(slots=True)
class Settings:
    """Generation settings grouped by concern."""

    package_name: str = ""
    classes_dir: Path = Path("target/classes")
    output_dir: Path = Path("target/generated-test-sources/java")
    classpath: tuple[Path, ...] = ()
    generator_jar: Path | None = None
    extra_parameters: str | None = None
    working_directory: Path = Path(".")
    java_executable: str = "java"
    execution: ExecutionSettings = field(default_factory=ExecutionSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from ``RANDOOP_RUNNER_*`` environment variables."""

        generator_jar = os.getenv("RANDOOP_RUNNER_GENERATOR_JAR")
        return cls(
            package_name=os.getenv("RANDOOP_RUNNER_PACKAGE_NAME", "").strip(),
            classes_dir=Path(os.getenv("RANDOOP_RUNNER_CLASSES_DIR", "target/classes")),
            output_dir=Path(
                os.getenv("RANDOOP_RUNNER_OUTPUT_DIR", "target/generated-test-sources/java"),
            ),
            classpath=_split_path_list(os.getenv("RANDOOP_RUNNER_CLASSPATH", "")),
            generator_jar=Path(generator_jar) if generator_jar else None,
            extra_parameters=os.getenv("RANDOOP_RUNNER_EXTRA_PARAMETERS") or None,
            working_directory=Path(os.getenv("RANDOOP_RUNNER_WORKING_DIRECTORY", ".")),
            java_executable=os.getenv("RANDOOP_RUNNER_JAVA", "java"),
            execution=ExecutionSettings(
                timeout_seconds=int(os.getenv("RANDOOP_RUNNER_TIMEOUT_SECONDS", "30")),
                thread_count=int(os.getenv("RANDOOP_RUNNER_THREAD_COUNT", "1")),
                grace_seconds=float(os.getenv("RANDOOP_RUNNER_GRACE_SECONDS", "10")),
                output_tail_lines=int(os.getenv("RANDOOP_RUNNER_OUTPUT_TAIL_LINES", "20")),
                allow_failures=_env_bool("RANDOOP_RUNNER_ALLOW_FAILURES", default=False),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the generator cannot run with."""

        if not self.package_name:
            raise ValueError(
                "A package name is required. Set RANDOOP_RUNNER_PACKAGE_NAME or pass --package.",
            )
        if not _PACKAGE_NAME_RE.match(self.package_name):
            raise ValueError(f"Invalid Java package name: {self.package_name!r}")
        if self.execution.timeout_seconds <= 0:
            raise ValueError("RANDOOP_RUNNER_TIMEOUT_SECONDS must be > 0.")
        if self.execution.thread_count < 1:
            raise ValueError("RANDOOP_RUNNER_THREAD_COUNT must be >= 1.")
        if self.execution.grace_seconds < 0:
            raise ValueError("RANDOOP_RUNNER_GRACE_SECONDS must be >= 0.")
        if self.execution.output_tail_lines < 0:
            raise ValueError("RANDOOP_RUNNER_OUTPUT_TAIL_LINES must be >= 0.")
        if not self.java_executable.strip():
            raise ValueError("RANDOOP_RUNNER_JAVA must not be empty.")

    def discovery_roots(self) -> tuple[Path, ...]:
        """Compiled classes first, then dependency entries, without duplicates.

        Relative entries are resolved against the current directory, so the
        generator sees the same roots from its own working directory.
        """

        return tuple(dict.fromkeys(path.resolve() for path in (self.classes_dir, *self.classpath)))


def _split_path_list(value: str) -> tuple[Path, ...]:
    return tuple(Path(item.strip()) for item in value.split(os.pathsep) if item.strip())


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
