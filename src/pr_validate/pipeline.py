# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sequential orchestration of a pull-request validation run.

Stages run one after another and every external tool finishes before the
next begins: deployment validation relies on the artifacts written by the
git delta step. Analyzer findings and deployment failures are recorded as
failed :class:`~pr_validate.report.StageResult` objects and never stop the
run; unmet preconditions raise :class:`~pr_validate.errors.PreconditionError`
and abort it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final

from .analyzers import check_tools, ensure_sgd_plugin, run_eslint, run_pmd
from .changes import ChangeRecord, RoutingResult, classify, format_change_record
from .cleanup import discard_artifacts
from .config import RunConfig
from .deploy import DEPLOY_STAGE, DELTA_STAGE, generate_delta, validate_deployment
from .errors import PreconditionError
from .git import GitDelta
from .interfaces import RunLogger
from .process import CommandExecutor, SubprocessExecutor, is_available
from .report import ReportWriter, StageResult

TOTAL_STEPS: Final[int] = 5
DEPLOY_POLICY_STAGES: Final[frozenset[str]] = frozenset({DELTA_STAGE, DEPLOY_STAGE})


@dataclass(slots=True)
class StepCounter:
    """Number pipeline steps as they are announced."""

    total: int = TOTAL_STEPS
    current: int = 0

    def advance(self, title: str) -> str:
        """Return the heading for the next step."""

        self.current += 1
        return f"Step {self.current}/{self.total}: {title}"


@dataclass(slots=True)
class PipelineOutcome:
    """Result of a completed run."""

    exit_code: int = 0
    stages: list[StageResult] = field(default_factory=list)
    routing: RoutingResult | None = None
    changed_files: int = 0
    parse_warnings: list[str] = field(default_factory=list)

    @property
    def no_changes(self) -> bool:
        """Return ``True`` when the run stopped early because nothing changed."""

        return self.routing is None

    @property
    def deploy_failed(self) -> bool:
        """Return ``True`` when delta generation or deployment validation failed."""

        return any(
            stage.name in DEPLOY_POLICY_STAGES and not stage.ok and not stage.skipped for stage in self.stages
        )


class ValidationPipeline:
    """Run the five validation steps for a single :class:`RunConfig`."""

    def __init__(
        self,
        config: RunConfig,
        logger: RunLogger,
        *,
        executor: CommandExecutor | None = None,
        available: Callable[[str], bool] = is_available,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a pipeline.

        Args:
            config: Immutable run configuration.
            logger: Progress logger.
            executor: Command executor shared by every external call.
            available: Predicate deciding whether an executable resolves on ``PATH``.
            clock: Source of the report timestamp.
        """

        self._config = config
        self._logger = logger
        self._executor = executor or SubprocessExecutor(timeout=config.command_timeout)
        self._available = available
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._steps = StepCounter()
        self._report = ReportWriter(config.paths.results)
        self._git = GitDelta(config.root, executor=self._executor, git=config.commands.git)

    @property
    def executor(self) -> CommandExecutor:
        """Return the executor shared by every external call."""

        return self._executor

    @property
    def report(self) -> ReportWriter:
        """Return the writer of the aggregate report."""

        return self._report

    def run(self) -> PipelineOutcome:
        """Execute the pipeline.

        Returns:
            PipelineOutcome: Stage results and the process exit code.

        Raises:
            PreconditionError: If the alias is missing, the root is not a git
                repository, a mandatory tool is absent, or the target branch
                cannot be resolved.
        """

        config = self._config
        logger = self._logger
        if not config.alias:
            raise PreconditionError("The org alias is required. Define ALIAS_DEFAULT in .env or pass --alias.")
        self._report.start(generated_at=self._clock())
        outcome = PipelineOutcome()

        logger.step(self._steps.advance("Validating environment and dependencies..."))
        self._git.ensure_repository()
        tools = check_tools(config, logger, available=self._available)
        if tools.sf:
            outcome.stages.append(ensure_sgd_plugin(config, self._executor, logger))
        else:
            logger.warn("sf CLI not found; skipping the sfdx-git-delta plugin check.")

        logger.step(self._steps.advance("Git operations: analyzing differences..."))
        records = self._collect_changes(outcome)
        if not records:
            logger.info("No modified files were found. Finishing.")
            self._finish(outcome)
            return outcome
        routing = classify(records, config.filters)
        outcome.routing = routing
        outcome.changed_files = len(records)
        logger.ok(f"Found {len(records)} changed files.")
        logger.verbose(f"Changes saved to {config.paths.diff}")

        logger.step(self._steps.advance("Apex static analysis (PMD)..."))
        pmd = run_pmd(routing.apex_files, config, self._executor, logger)
        self._record(outcome, "PMD REPORTS (APEX)", pmd)

        logger.step(self._steps.advance("JavaScript linting (ESLint)..."))
        eslint = run_eslint(routing.js_files, config, self._executor, logger)
        self._record(outcome, "ESLINT REPORTS (JS)", eslint)

        logger.step(self._steps.advance("Generating delta and validating deployment..."))
        self._validate_deployment(outcome, sf_available=tools.sf)

        if outcome.deploy_failed and config.fail_on_deploy_failure:
            outcome.exit_code = 1
        self._finish(outcome)
        return outcome

    def _collect_changes(self, outcome: PipelineOutcome) -> list[ChangeRecord]:
        config = self._config
        logger = self._logger
        logger.info(f"Current branch: {self._git.current_branch()}")
        logger.info(f"Target branch: {config.base_ref}")
        logger.info("Updating references (git fetch)...")
        fetched = self._git.fetch_all(stream=config.verbose)
        if not fetched.ok:
            logger.warn(f"git fetch exited with status {fetched.returncode}; using cached references.")
        if not self._git.remote_ref_exists(config.remote, config.target_branch):
            raise PreconditionError(f"The target branch {config.base_ref} does not exist.")

        parsed = self._git.diff_name_status(config.base_ref)
        config.paths.diff.parent.mkdir(parents=True, exist_ok=True)
        config.paths.diff.write_text(
            "".join(f"{format_change_record(record)}\n" for record in parsed.records),
            encoding="utf-8",
        )
        for warning in parsed.warnings:
            logger.warn(f"Skipped malformed change record ({warning}).")
        if parsed.warnings:
            outcome.parse_warnings.extend(parsed.warnings)
            self._report.append_section("CHANGE PARSE WARNINGS", "\n".join(parsed.warnings))
        return parsed.records

    def _validate_deployment(self, outcome: PipelineOutcome, *, sf_available: bool) -> None:
        config = self._config
        if not sf_available:
            missing = StageResult(name=DEPLOY_STAGE, ok=False, output=f"{config.commands.sf} was not found on PATH.\n")
            self._logger.fail("Deployment validation requires the sf CLI.")
            self._record(outcome, "DEPLOY VALIDATION", missing)
            return
        delta = generate_delta(config, self._executor, self._logger)
        outcome.stages.append(delta)
        if not delta.ok:
            self._report.append_result("DELTA GENERATION", delta)
            self._logger.fail("Deployment validation not attempted: delta generation failed.")
            blocked = StageResult(
                name=DEPLOY_STAGE,
                ok=False,
                output="Not attempted because delta generation failed.\n",
            )
            self._record(outcome, "DEPLOY VALIDATION", blocked)
            return
        deployed = validate_deployment(config, self._executor, self._logger)
        self._record(outcome, "DEPLOY VALIDATION", deployed)

    def _record(self, outcome: PipelineOutcome, title: str, result: StageResult) -> None:
        outcome.stages.append(result)
        self._report.append_result(title, result)

    def _finish(self, outcome: PipelineOutcome) -> None:
        config = self._config
        if config.discard:
            self._logger.info("Removing temporary files (--discard)...")
            discard_artifacts(config.paths.temporary(), root=config.root, logger=self._logger)
        self._logger.ok("Process completed.")
        self._logger.info(f"Static analysis results saved to: {config.paths.results}")
        if outcome.exit_code:
            self._logger.fail("Deployment validation failed and fail-on-deploy-failure is enabled.")


__all__ = ["PipelineOutcome", "StepCounter", "TOTAL_STEPS", "ValidationPipeline"]
