# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool availability checks and the PMD / ESLint analyzer stages."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .config import SGD_PLUGIN, RunConfig
from .errors import PreconditionError
from .interfaces import RunLogger
from .process import CommandExecutor, is_available
from .report import StageResult

PMD_STAGE: Final[str] = "PMD (Apex)"
ESLINT_STAGE: Final[str] = "ESLint (JS)"
PLUGIN_STAGE: Final[str] = "sfdx-git-delta plugin"

Availability = Callable[[str], bool]


@dataclass(slots=True, frozen=True)
class ToolAvailability:
    """Optional tools the later stages depend on."""

    sf: bool


def check_tools(config: RunConfig, logger: RunLogger, *, available: Availability = is_available) -> ToolAvailability:
    """Verify the external tools needed by the run.

    ``git`` and ``npm`` are mandatory. ``sf`` and the PMD launcher are only
    reported when absent; the stages that need them record a failure later.

    Args:
        config: Run configuration naming the tool commands.
        logger: Progress logger.
        available: Predicate deciding whether an executable resolves.

    Returns:
        ToolAvailability: Whether the ``sf`` CLI resolved.

    Raises:
        PreconditionError: If a mandatory tool is missing.
    """

    commands = config.commands
    for required in (commands.git, commands.npm):
        if not available(required):
            raise PreconditionError(f"{required} is not installed. Please install it.")
        logger.verbose(f"{required} detected.")
    present: dict[str, bool] = {}
    for executable in (commands.sf, commands.pmd[0]):
        present[executable] = available(executable)
        if present[executable]:
            logger.verbose(f"{executable} detected.")
        else:
            logger.info(f"Tool {executable} not found on PATH; stages using it will report an error.")
    return ToolAvailability(sf=present[commands.sf])


def ensure_sgd_plugin(config: RunConfig, executor: CommandExecutor, logger: RunLogger) -> StageResult:
    """Install the ``sfdx-git-delta`` plugin when ``sf`` does not report it."""

    sf = config.commands.sf
    inspected = executor([sf, "plugins", "inspect", SGD_PLUGIN], cwd=config.root)
    if inspected.ok:
        logger.verbose(f"Plugin {SGD_PLUGIN} already installed.")
        return StageResult(name=PLUGIN_STAGE, ok=True, skipped=True)
    logger.info(f"Installing plugin {SGD_PLUGIN}...")
    installed = executor(
        [sf, "plugins", "install", SGD_PLUGIN],
        cwd=config.root,
        stream=config.verbose,
        input_text="y\n",
    )
    if installed.ok:
        logger.ok(f"Plugin {SGD_PLUGIN} installed.")
    else:
        logger.warn(f"Installing {SGD_PLUGIN} failed (exit status {installed.returncode}).")
    return StageResult(name=PLUGIN_STAGE, ok=installed.ok, output=installed.output)


def write_file_list(path: Path, files: Sequence[str]) -> None:
    """Write ``files`` one per line, the format PMD's ``--file-list`` expects."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{name}\n" for name in files), encoding="utf-8")


def _run_tool(
    name: str,
    args: Sequence[str],
    config: RunConfig,
    executor: CommandExecutor,
) -> StageResult:
    try:
        outcome = executor(args, cwd=config.root, stream=config.verbose)
    except FileNotFoundError as exc:
        return StageResult(name=name, ok=False, output=f"{exc}\n")
    return StageResult(name=name, ok=outcome.ok, output=outcome.output)


def build_pmd_command(config: RunConfig) -> list[str]:
    """Return the PMD invocation analysing the files listed in the PMD list file."""

    return [
        *config.commands.pmd,
        "check",
        "-d",
        ".",
        "-R",
        str(config.pmd_rules),
        "--file-list",
        str(config.paths.pmd_list),
        "--no-cache",
        "--no-progress",
    ]


def run_pmd(files: Sequence[str], config: RunConfig, executor: CommandExecutor, logger: RunLogger) -> StageResult:
    """Run PMD over the Apex ``files``.

    A non-zero exit means PMD found violations; it is recorded as a failed
    stage without stopping the pipeline.
    """

    if not files:
        logger.info(f"No modified {config.filters['apex']} files found.")
        return StageResult(name=PMD_STAGE, ok=True, output="No Apex changes.\n", skipped=True)
    write_file_list(config.paths.pmd_list, files)
    logger.info(f"Analyzing {len(files)} Apex classes...")
    logger.verbose(f"File list written to {config.paths.pmd_list}")
    result = _run_tool(PMD_STAGE, build_pmd_command(config), config, executor)
    if result.ok:
        logger.ok("PMD analysis completed.")
    else:
        logger.warn("PMD analysis completed with findings or errors; see the report.")
    return result


def run_eslint(files: Sequence[str], config: RunConfig, executor: CommandExecutor, logger: RunLogger) -> StageResult:
    """Run ESLint with the JavaScript ``files`` passed as arguments."""

    if not files:
        logger.info(f"No modified {config.filters['js']} files found.")
        return StageResult(name=ESLINT_STAGE, ok=True, output="No JS changes.\n", skipped=True)
    write_file_list(config.paths.js_list, files)
    logger.info(f"Analyzing {len(files)} JS files...")
    result = _run_tool(ESLINT_STAGE, [*config.commands.eslint, *files], config, executor)
    if result.ok:
        logger.ok("ESLint analysis completed.")
    else:
        logger.warn("ESLint analysis completed with findings or errors; see the report.")
    return result


__all__ = [
    "ESLINT_STAGE",
    "PLUGIN_STAGE",
    "PMD_STAGE",
    "ToolAvailability",
    "build_pmd_command",
    "check_tools",
    "ensure_sgd_plugin",
    "run_eslint",
    "run_pmd",
    "write_file_list",
]
