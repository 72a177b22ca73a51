from __future__ import annotations

import os
from pathlib import Path

import allure
import pytest

from randoop_runner.config import ExecutionSettings, Settings

pytestmark = [
    allure.epic("Generator Invocation"),
    allure.feature("Configuration"),
]


def test_from_env_defaults(clean_env) -> None:
    settings = Settings.from_env()

    assert settings.package_name == ""
    assert settings.classes_dir == Path("target/classes")
    assert settings.output_dir == Path("target/generated-test-sources/java")
    assert settings.classpath == ()
    assert settings.generator_jar is None
    assert settings.java_executable == "java"
    assert settings.execution == ExecutionSettings()
    assert settings.execution.timeout_seconds == 30
    assert settings.execution.thread_count == 1
    assert settings.execution.grace_seconds == 10.0


def test_from_env_reads_overrides(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("RANDOOP_RUNNER_PACKAGE_NAME", " com.example ")
    monkeypatch.setenv("RANDOOP_RUNNER_CLASSPATH", os.pathsep.join(["a.jar", "", "libs"]))
    monkeypatch.setenv("RANDOOP_RUNNER_GENERATOR_JAR", "tools/randoop.jar")
    monkeypatch.setenv("RANDOOP_RUNNER_TIMEOUT_SECONDS", "12")
    monkeypatch.setenv("RANDOOP_RUNNER_THREAD_COUNT", "4")
    monkeypatch.setenv("RANDOOP_RUNNER_GRACE_SECONDS", "2.5")
    monkeypatch.setenv("RANDOOP_RUNNER_ALLOW_FAILURES", "yes")

    settings = Settings.from_env()

    assert settings.package_name == "com.example"
    assert settings.classpath == (Path("a.jar"), Path("libs"))
    assert settings.generator_jar == Path("tools/randoop.jar")
    assert settings.execution.timeout_seconds == 12
    assert settings.execution.thread_count == 4
    assert settings.execution.grace_seconds == 2.5
    assert settings.execution.allow_failures is True


def test_from_env_rejects_invalid_boolean(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("RANDOOP_RUNNER_ALLOW_FAILURES", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean value"):
        Settings.from_env()


def test_validate_requires_package_name() -> None:
    with pytest.raises(ValueError, match="package name is required"):
        Settings().validate()


def test_validate_rejects_malformed_package_name() -> None:
    with pytest.raises(ValueError, match="Invalid Java package name"):
        Settings(package_name="com..example").validate()


@pytest.mark.parametrize(
    ("execution", "message"),
    [
        (ExecutionSettings(timeout_seconds=0), "TIMEOUT_SECONDS"),
        (ExecutionSettings(thread_count=0), "THREAD_COUNT"),
        (ExecutionSettings(grace_seconds=-1), "GRACE_SECONDS"),
        (ExecutionSettings(output_tail_lines=-1), "OUTPUT_TAIL_LINES"),
    ],
)
def test_validate_rejects_bad_execution_limits(execution, message) -> None:
    with pytest.raises(ValueError, match=message):
        Settings(package_name="com.example", execution=execution).validate()


def test_discovery_roots_put_classes_first_without_duplicates() -> None:
    settings = Settings(
        package_name="com.example",
        classes_dir=Path("build/classes"),
        classpath=(Path("dep.jar"), Path("build/classes")),
    )

    roots = settings.discovery_roots()

    assert roots == (Path("build/classes").resolve(), Path("dep.jar").resolve())
    assert all(root.is_absolute() for root in roots)
