# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Incremental delta generation and validate-only deployment."""

from __future__ import annotations

from typing import Final

from .cleanup import discard_artifacts
from .config import RunConfig
from .interfaces import RunLogger
from .process import CommandExecutor
from .report import StageResult

DELTA_STAGE: Final[str] = "Delta generation"
DEPLOY_STAGE: Final[str] = "Deploy validation"


def build_delta_command(config: RunConfig) -> list[str]:
    """Return the ``sf sgd source delta`` call comparing the target branch with ``HEAD``."""

    return [
        config.commands.sf,
        "sgd",
        "source",
        "delta",
        "--to",
        "HEAD",
        "--from",
        config.base_ref,
        "--output",
        str(config.paths.delta_output),
        "--generate-delta",
    ]


def build_validate_command(config: RunConfig) -> list[str]:
    """Return the ``sf project deploy validate`` call for the generated manifest.

    When ``config.tests`` is non-empty the validation runs only those tests.
    """

    command = [
        config.commands.sf,
        "project",
        "deploy",
        "validate",
        "--manifest",
        str(config.paths.manifest),
        "--target-org",
        config.alias,
        "--wait",
        str(config.deploy_wait_minutes),
    ]
    if config.tests:
        command.extend(["--test-level", "RunSpecifiedTests"])
        for test in config.tests:
            command.extend(["--tests", test])
    return command


def generate_delta(config: RunConfig, executor: CommandExecutor, logger: RunLogger) -> StageResult:
    """Generate the incremental ``package.xml`` with sfdx-git-delta.

    Output left by an earlier run is removed first so the manifest always
    describes the current change set.
    """

    output = config.paths.delta_output
    cleared = discard_artifacts([output], root=config.root, logger=logger)
    if cleared.failed:
        message = f"Unable to clear previous delta output at {output}.\n"
        logger.fail(message.strip())
        return StageResult(name=DELTA_STAGE, ok=False, output=message)
    output.mkdir(parents=True, exist_ok=True)
    logger.info("Generating incremental package.xml...")
    try:
        outcome = executor(build_delta_command(config), cwd=config.root, stream=config.verbose)
    except FileNotFoundError as exc:
        logger.fail(str(exc))
        return StageResult(name=DELTA_STAGE, ok=False, output=f"{exc}\n")
    if not outcome.ok:
        logger.warn(f"Delta generation exited with status {outcome.returncode}.")
    return StageResult(name=DELTA_STAGE, ok=outcome.ok, output=outcome.output)


def validate_deployment(config: RunConfig, executor: CommandExecutor, logger: RunLogger) -> StageResult:
    """Validate the delta manifest against ``config.alias`` without deploying it.

    Returns a skipped result when no manifest was generated.
    """

    manifest = config.paths.manifest
    if not manifest.is_file():
        logger.info("No valid package.xml was generated or no deployable differences were detected.")
        return StageResult(name=DEPLOY_STAGE, ok=True, output="No deployable changes.\n", skipped=True)
    logger.info(f"Starting validation against org: {config.alias}")
    logger.verbose(f"Using manifest: {manifest}")
    try:
        outcome = executor(build_validate_command(config), cwd=config.root, stream=True)
    except FileNotFoundError as exc:
        logger.fail(str(exc))
        return StageResult(name=DEPLOY_STAGE, ok=False, output=f"{exc}\n")
    if outcome.ok:
        logger.ok("Deployment validation SUCCEEDED.")
    else:
        logger.fail("Deployment validation failed.")
    return StageResult(name=DEPLOY_STAGE, ok=outcome.ok, output=outcome.output)


__all__ = [
    "DELTA_STAGE",
    "DEPLOY_STAGE",
    "build_delta_command",
    "build_validate_command",
    "generate_delta",
    "validate_deployment",
]
