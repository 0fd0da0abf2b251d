# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point for ``pr-validate``."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import click
import typer

from ..config import build_run_config, load_settings
from ..errors import ConfigError, PreconditionError
from ..pipeline import PipelineOutcome, ValidationPipeline
from ..report import emit_summary
from .shared import CLIError, CLILogger, build_cli_logger

app = typer.Typer(
    name="pr-validate",
    help="Validate a pull request: lint changed files, run static analysis and validate the deployment.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

TARGET_OPTION = Annotated[
    str | None,
    typer.Option("--target", help="Target branch (e.g. develop). Defaults to TARGET_DEFAULT."),
]
ALIAS_OPTION = Annotated[
    str | None,
    typer.Option("--alias", help="Salesforce org alias used for validation. Defaults to ALIAS_DEFAULT."),
]
REMOTE_OPTION = Annotated[
    str | None,
    typer.Option("--remote", help="Remote holding the target branch. Defaults to REMOTE_NAME (origin)."),
]
TESTS_OPTION = Annotated[
    list[str] | None,
    typer.Option("--tests", help="Apex test class to run during validation (repeatable)."),
]
DISCARD_OPTION = Annotated[
    bool,
    typer.Option("--discard", help="Delete the temporary files (diff, file lists, delta) when finished."),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", help="Stream command output live."),
]
FAIL_ON_DEPLOY_OPTION = Annotated[
    bool | None,
    typer.Option(
        "--fail-on-deploy-failure/--no-fail-on-deploy-failure",
        help="Exit with status 1 when deployment validation fails. Defaults to FAIL_ON_DEPLOY_FAILURE.",
    ),
]
ENV_FILE_OPTION = Annotated[
    Path | None,
    typer.Option("--env-file", help="Dotenv file with default values. Defaults to <root>/.env."),
]
ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root (git checkout)."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]


@dataclass(slots=True)
class ValidateCLIOptions:
    """Capture CLI overrides supplied to the validate command."""

    root: Path
    target: str | None
    alias: str | None
    remote: str | None
    tests: tuple[str, ...]
    discard: bool
    verbose: bool
    fail_on_deploy_failure: bool | None
    env_file: Path | None
    emoji: bool
    color: bool


def run_validation(options: ValidateCLIOptions, logger: CLILogger) -> PipelineOutcome:
    """Load configuration and execute the pipeline.

    Args:
        options: Parsed CLI options.
        logger: Logger bound to the CLI presentation flags.

    Returns:
        PipelineOutcome: Outcome of the completed run.

    Raises:
        CLIError: When configuration is invalid or a precondition fails.
    """

    env_file = options.env_file
    if env_file is not None and not env_file.is_file():
        raise CLIError(f"Dotenv file {env_file} does not exist.")
    try:
        settings, found = load_settings(options.root, env_file)
        if not found:
            logger.warn(".env file not found. Using built-in default values.")
        config = build_run_config(
            settings,
            root=options.root,
            target=options.target,
            alias=options.alias,
            remote=options.remote,
            tests=options.tests,
            discard=options.discard,
            verbose=options.verbose,
            emoji=options.emoji,
            color=options.color,
            fail_on_deploy_failure=options.fail_on_deploy_failure,
        )
        return ValidationPipeline(config, logger).run()
    except (ConfigError, PreconditionError) as exc:
        raise CLIError(str(exc)) from exc


@app.command()
def validate(
    target: TARGET_OPTION = None,
    alias: ALIAS_OPTION = None,
    remote: REMOTE_OPTION = None,
    tests: TESTS_OPTION = None,
    discard: DISCARD_OPTION = False,
    verbose: VERBOSE_OPTION = False,
    fail_on_deploy_failure: FAIL_ON_DEPLOY_OPTION = None,
    env_file: ENV_FILE_OPTION = None,
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
) -> None:
    """Validate the current branch against the target branch."""

    options = ValidateCLIOptions(
        root=root.resolve(),
        target=target,
        alias=alias,
        remote=remote,
        tests=tuple(tests or ()),
        discard=discard,
        verbose=verbose,
        fail_on_deploy_failure=fail_on_deploy_failure,
        env_file=env_file,
        emoji=emoji,
        color=color,
    )
    logger = build_cli_logger(emoji=emoji, color=color, verbose=verbose)
    try:
        outcome = run_validation(options, logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    emit_summary(outcome.stages, use_color=color, use_emoji=emoji)
    raise typer.Exit(code=outcome.exit_code)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit status.

    Usage errors such as unknown flags exit with status 1 rather than
    Click's default of 2.

    Args:
        argv: Command-line arguments; ``sys.argv[1:]`` when omitted.

    Returns:
        int: Process exit status.
    """

    try:
        result = app(args=list(argv) if argv is not None else None, prog_name="pr-validate", standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        return 1
    return result if isinstance(result, int) else 0


__all__ = ["ValidateCLIOptions", "app", "main", "run_validation"]
