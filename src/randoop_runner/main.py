"""CLI entrypoint for randoop-runner."""

import logging
from pathlib import Path

import rich_click as click

from randoop_runner import __version__
from randoop_runner.controllers import (
    DiscoverCommand,
    GenerationCliController,
    GenerationOverrides,
    GenTestsCommand,
)
from randoop_runner.discovery import DiscoveryError

click.rich_click.USE_MARKDOWN = True
GENERATION_CONTROLLER = GenerationCliController()


@click.group()
@click.version_option(version=__version__, prog_name="randoop-runner")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Progress logging level (written to stderr).",
)
def randoop_runner(log_level: str) -> None:
    """Generate Randoop tests for every class of a package, in parallel."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
    )


def _common_options(command):
    options = [
        click.option(
            "--package",
            "package_name",
            default=None,
            help="Java package to scan. Falls back to RANDOOP_RUNNER_PACKAGE_NAME.",
        ),
        click.option(
            "--classes-dir",
            type=click.Path(path_type=Path),
            default=None,
            help="Directory with compiled project classes.",
        ),
        click.option(
            "--classpath",
            "classpath",
            type=click.Path(path_type=Path),
            multiple=True,
            help="Dependency classpath entry (directory or jar). Can be repeated.",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


@randoop_runner.command("discover")
@_common_options
def discover(
    package_name: str | None,
    classes_dir: Path | None,
    classpath: tuple[Path, ...],
) -> None:
    """List the classes that would be handed to the generator."""

    try:
        lines = GENERATION_CONTROLLER.discover(
            DiscoverCommand(
                overrides=GenerationOverrides(
                    package_name=package_name,
                    classes_dir=classes_dir,
                    classpath=classpath,
                ),
            ),
        )
    except (ValueError, DiscoveryError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@randoop_runner.command("gentests")
@_common_options
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory for generated JUnit sources.",
)
@click.option(
    "--generator-jar",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the Randoop jar.",
)
@click.option(
    "--extra-parameters",
    default=None,
    help="Additional generator flags appended to the command line.",
)
@click.option(
    "--working-dir",
    "working_directory",
    type=click.Path(path_type=Path),
    default=None,
    help="Current directory for generator processes.",
)
@click.option("--java", "java_executable", default=None, help="Java executable.")
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.IntRange(min=1),
    default=None,
    help="Per-class generation time limit in seconds.",
)
@click.option(
    "--threads",
    "thread_count",
    type=click.IntRange(min=1),
    default=None,
    help="Number of generator processes running at once.",
)
@click.option(
    "--grace",
    "grace_seconds",
    type=click.FloatRange(min=0),
    default=None,
    help="Extra seconds allowed past the time limit before a job counts as timed out.",
)
@click.option(
    "--allow-failures",
    is_flag=True,
    default=False,
    help="Exit with status 0 even when some classes failed.",
)
@click.option(
    "--show-output",
    is_flag=True,
    default=False,
    help="Print the tail of the generator output for failed classes.",
)
def gentests(  # noqa: PLR0913
    package_name: str | None,
    classes_dir: Path | None,
    classpath: tuple[Path, ...],
    output_dir: Path | None,
    generator_jar: Path | None,
    extra_parameters: str | None,
    working_directory: Path | None,
    java_executable: str | None,
    timeout_seconds: int | None,
    thread_count: int | None,
    grace_seconds: float | None,
    allow_failures: bool,
    show_output: bool,
) -> None:
    """Run the generator once per discovered class and wait for all of them."""

    try:
        result = GENERATION_CONTROLLER.gentests(
            GenTestsCommand(
                overrides=GenerationOverrides(
                    package_name=package_name,
                    classes_dir=classes_dir,
                    output_dir=output_dir,
                    classpath=classpath,
                    generator_jar=generator_jar,
                    extra_parameters=extra_parameters,
                    working_directory=working_directory,
                    java_executable=java_executable,
                ),
                timeout_seconds=timeout_seconds,
                thread_count=thread_count,
                grace_seconds=grace_seconds,
                allow_failures=allow_failures,
                show_output=show_output,
            ),
        )
    except (ValueError, DiscoveryError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Test generation failed for some classes.")


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    randoop_runner()
