from __future__ import annotations

import os
from pathlib import Path

import allure

from randoop_runner.arguments import (
    build_argument_template,
    build_classpath,
    build_runtime_classpath,
    per_target_tokens,
    resolve_generator_jar,
)
from randoop_runner.config import ExecutionSettings, Settings

pytestmark = [
    allure.epic("Generator Invocation"),
    allure.feature("Command Line"),
]


def test_template_starts_with_java_entry_point_and_command() -> None:
    settings = Settings(package_name="com.example", java_executable="/opt/jdk/bin/java")

    args = build_argument_template(settings, "a.jar")

    assert args[:6] == [
        "/opt/jdk/bin/java",
        "-ea",
        "-classpath",
        "a.jar",
        "randoop.main.Main",
        "gentests",
    ]


def test_template_carries_limits_and_output_location() -> None:
    settings = Settings(
        package_name="com.example",
        output_dir=Path("out/tests"),
        execution=ExecutionSettings(timeout_seconds=45),
    )

    args = build_argument_template(settings, "cp")

    assert "--time-limit=45" in args
    assert "--junit-package-name=com.example" in args
    assert f"--junit-output-dir={Path('out/tests').resolve()}" in args
    assert "--randomseed=0" in args
    assert args[-1] == "--call-timeout=5000"


def test_extra_parameters_are_split_with_shell_rules() -> None:
    settings = Settings(
        package_name="com.example",
        extra_parameters="--omit-methods='^toString$' --output-limit=10",
    )

    args = build_argument_template(settings, "cp")

    assert args[-2:] == ["--omit-methods=^toString$", "--output-limit=10"]


def test_per_target_tokens_name_class_basename_and_package() -> None:
    assert per_target_tokens("com.example.Foo") == [
        "--testclass=com.example.Foo",
        "--regression-test-basename=FooRandoopTest",
        "--junit-package-name=com.example",
    ]
    assert per_target_tokens("com.example.Outer$Inner")[1] == (
        "--regression-test-basename=InnerRandoopTest"
    )


def test_classpath_joins_with_platform_separator() -> None:
    assert build_classpath([Path("a"), "b.jar"]) == f"a{os.pathsep}b.jar"


def test_missing_generator_jar_is_logged_and_ignored(tmp_path: Path, caplog) -> None:
    caplog.set_level("ERROR", logger="randoop_runner")

    assert resolve_generator_jar(tmp_path / "randoop.jar") is None
    assert resolve_generator_jar(None) is None
    assert "Generator jar is not found" in caplog.text


def test_runtime_classpath_puts_generator_jar_first(tmp_path: Path) -> None:
    jar = tmp_path / "randoop.jar"
    jar.write_bytes(b"")
    classes = tmp_path / "classes"
    dep = tmp_path / "dep.jar"
    settings = Settings(
        package_name="com.example",
        classes_dir=classes,
        classpath=(dep, classes),
        generator_jar=jar,
    )

    expected = [str(path.resolve()) for path in (jar, classes, dep)]
    assert build_runtime_classpath(settings) == os.pathsep.join(expected)
