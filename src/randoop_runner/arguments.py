"""Build the generator command line shared by every job, plus per-class tokens."""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Iterable
from pathlib import Path

from randoop_runner.config import Settings
from randoop_runner.discovery import package_of, simple_name

logger = logging.getLogger(__name__)

GENERATOR_MAIN_CLASS = "randoop.main.Main"
GENERATOR_COMMAND = "gentests"
TEST_CLASS_SUFFIX = "RandoopTest"


def build_classpath(entries: Iterable[Path | str]) -> str:
    return os.pathsep.join(str(entry) for entry in entries)


def resolve_generator_jar(path: Path | None) -> Path | None:
    """Return the generator jar if it exists; a wrong path is logged, not raised."""

    if path is None:
        return None
    if path.is_file():
        return path.resolve()
    logger.error("Generator jar is not found by this path: %s", path)
    return None


def build_runtime_classpath(settings: Settings) -> str:
    """Generator jar (when present), compiled classes, then dependency entries."""

    entries: list[Path] = []
    generator_jar = resolve_generator_jar(settings.generator_jar)
    if generator_jar is not None:
        entries.append(generator_jar)
    entries.extend(settings.discovery_roots())
    return build_classpath(dict.fromkeys(entries))


def build_argument_template(settings: Settings, classpath: str) -> list[str]:
    """Fixed generator flags passed to every job, before the per-class tokens."""

    args = [
        settings.java_executable,
        "-ea",
        "-classpath",
        classpath,
        GENERATOR_MAIN_CLASS,
        GENERATOR_COMMAND,
        # Code under test
        "--only-test-public-members=false",
        "--flaky-test-behavior=OUTPUT",
        "--nondeterministic-methods-to-output=1000",
        # Which tests to output
        "--no-error-revealing-tests=false",
        "--no-regression-tests=false",
        "--no-regression-assertions=false",
        "--check-compilable=true",
        "--minimize-error-test=false",
        # Test classification
        "--checked-exception=EXPECTED",
        "--unchecked-exception=EXPECTED",
        "--cm-exception=INVALID",
        "--ncdf-exception=INVALID",
        "--npe-on-null-input=EXPECTED",
        "--npe-on-non-null-input=ERROR",
        "--oom-exception=INVALID",
        "--sof-exception=INVALID",
        "--use-jdk-specifications=true",
        "--ignore-condition-compilation-error=false",
        "--ignore-condition-exception=false",
        # Limiting test generation
        f"--time-limit={settings.execution.timeout_seconds}",
        "--attempted-limit=100000000",
        "--generated-limit=100000000",
        "--output-limit=100000000",
        "--maxsize=1000",
        "--stop-on-error-test=false",
        # Values used in tests
        "--null-ratio=0.05",
        "--forbid-null=false",
        "--literals-level=CLASS",
        "--method-selection=UNIFORM",
        "--string-maxlen=1000",
        # Varying the nature of generated tests
        "--alias-ratio=0.0",
        "--input-selection=UNIFORM",
        "--clear=100000000",
        # Outputting the JUnit tests
        f"--junit-package-name={settings.package_name}",
        f"--junit-output-dir={settings.output_dir.resolve()}",
        "--dont-output-tests=false",
        "--junit-reflection-allowed=true",
        # Controlling randomness
        "--randomseed=0",
        "--deterministic=false",
        # Logging and troubleshooting
        "--progressdisplay=false",
        "--debug-checks=false",
        # Threading
        "--usethreads=false",
        "--call-timeout=5000",
    ]
    if settings.extra_parameters:
        args.extend(shlex.split(settings.extra_parameters))
    return args


def per_target_tokens(target_id: str) -> list[str]:
    """Tokens naming the class under test, the test basename, and its package."""

    return [
        f"--testclass={target_id}",
        f"--regression-test-basename={simple_name(target_id)}{TEST_CLASS_SUFFIX}",
        f"--junit-package-name={package_of(target_id)}",
    ]
