# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration sources and the immutable run configuration."""

from __future__ import annotations

import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .changes import APEX_FILTER, JS_FILTER
from .errors import ConfigError

DEFAULT_ENV_FILE: Final[str] = ".env"
SGD_PLUGIN: Final[str] = "sfdx-git-delta"


class Settings(BaseSettings):
    """Defaults read from the process environment and an optional ``.env`` file.

    Field names match the upper-case variables found in existing ``.env`` files,
    matched case-insensitively (``ALIAS_DEFAULT``, ``CMD_PMD`` ...).
    """

    model_config = SettingsConfigDict(env_file=DEFAULT_ENV_FILE, env_file_encoding="utf-8", extra="ignore")

    alias_default: str = "sandbox"
    target_default: str = "develop"
    remote_name: str = "origin"
    path_pmd_list: str = "pmd-classes.txt"
    path_js_list: str = "js-scripts.txt"
    path_diff: str = "diff.txt"
    path_results: str = "results.txt"
    path_pmd_rules: str = "apex-rules.xml"
    path_delta_output: str = "deploy_delta"
    cmd_pmd: str = "pmd"
    cmd_eslint: str = "npx eslint"
    apex_extension: str = ".cls"
    js_extension: str = ".js"
    deploy_wait_minutes: int = Field(default=30, ge=1)
    command_timeout_seconds: float | None = Field(default=None, gt=0)
    fail_on_deploy_failure: bool = False

    @field_validator("apex_extension", "js_extension")
    @classmethod
    def _require_leading_dot(cls, value: str) -> str:
        """Reject extension filters that are not dotted suffixes."""

        stripped = value.strip()
        if not stripped.startswith(".") or len(stripped) < 2:
            raise ValueError(f"extension filter must look like '.ext', got {value!r}")
        return stripped

    @field_validator("cmd_pmd", "cmd_eslint")
    @classmethod
    def _require_command(cls, value: str) -> str:
        """Reject blank tool commands."""

        if not shlex.split(value):
            raise ValueError("tool command must not be empty")
        return value


def load_settings(root: Path, env_file: Path | None = None) -> tuple[Settings, bool]:
    """Load :class:`Settings` for the project rooted at ``root``.

    Args:
        root: Project root used to locate the default ``.env`` file.
        env_file: Explicit dotenv file overriding ``<root>/.env``.

    Returns:
        tuple[Settings, bool]: Loaded settings and whether a dotenv file was found.

    Raises:
        ConfigError: If a value fails validation.
    """

    candidate = env_file if env_file is not None else root / DEFAULT_ENV_FILE
    found = candidate.is_file()
    try:
        settings = Settings(_env_file=candidate if found else None)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    return settings, found


class ArtifactPaths(BaseModel):
    """Locations of the files produced during a run."""

    model_config = ConfigDict(frozen=True)

    diff: Path
    pmd_list: Path
    js_list: Path
    results: Path
    delta_output: Path

    @property
    def manifest(self) -> Path:
        """Return the incremental ``package.xml`` produced by the delta plugin."""

        return self.delta_output / "package" / "package.xml"

    def temporary(self) -> tuple[Path, ...]:
        """Return the artifacts removed by ``--discard`` (the report is kept)."""

        return (self.diff, self.pmd_list, self.js_list, self.delta_output)


class ToolCommands(BaseModel):
    """Base command lines for the external analyzers."""

    model_config = ConfigDict(frozen=True)

    pmd: tuple[str, ...]
    eslint: tuple[str, ...]
    sf: str = "sf"
    git: str = "git"
    npm: str = "npm"


class RunConfig(BaseModel):
    """Immutable configuration passed to every pipeline stage."""

    model_config = ConfigDict(frozen=True)

    root: Path
    target_branch: str
    alias: str
    remote: str = "origin"
    discard: bool = False
    verbose: bool = False
    emoji: bool = True
    color: bool = True
    tests: tuple[str, ...] = ()
    fail_on_deploy_failure: bool = False
    deploy_wait_minutes: int = 30
    command_timeout: float | None = None
    pmd_rules: Path
    filters: Mapping[str, str]
    paths: ArtifactPaths
    commands: ToolCommands

    @property
    def base_ref(self) -> str:
        """Return the remote-tracking reference the branch is compared against."""

        return f"{self.remote}/{self.target_branch}"


def _resolve(root: Path, raw: str) -> Path:
    path = Path(raw)
    return path if path.is_absolute() else root / path


def build_run_config(
    settings: Settings,
    *,
    root: Path,
    target: str | None = None,
    alias: str | None = None,
    remote: str | None = None,
    tests: Sequence[str] = (),
    discard: bool = False,
    verbose: bool = False,
    emoji: bool = True,
    color: bool = True,
    fail_on_deploy_failure: bool | None = None,
) -> RunConfig:
    """Merge ``settings`` with CLI overrides into a :class:`RunConfig`.

    Args:
        settings: Defaults loaded from the environment.
        root: Project root; relative artifact paths resolve against it.
        target: Target branch override.
        alias: Org alias override.
        remote: Remote name override.
        tests: Apex test classes to run during deployment validation.
        discard: Remove temporary artifacts after the run.
        verbose: Stream tool output live.
        emoji: Prefix console messages with emoji.
        color: Colourise console output.
        fail_on_deploy_failure: Exit-code policy override for failed validations.

    Returns:
        RunConfig: Frozen configuration for the run.

    Raises:
        ConfigError: If the target branch or remote resolve to an empty value.
    """

    resolved_target = (target if target is not None else settings.target_default).strip()
    if not resolved_target:
        raise ConfigError("The target branch must not be empty. Set TARGET_DEFAULT or pass --target")
    resolved_remote = (remote if remote is not None else settings.remote_name).strip()
    if not resolved_remote:
        raise ConfigError("The remote name must not be empty. Set REMOTE_NAME or pass --remote")
    return RunConfig(
        root=root,
        target_branch=resolved_target,
        alias=(alias if alias is not None else settings.alias_default).strip(),
        remote=resolved_remote,
        discard=discard,
        verbose=verbose,
        emoji=emoji,
        color=color,
        tests=tuple(test.strip() for test in tests if test.strip()),
        fail_on_deploy_failure=(
            settings.fail_on_deploy_failure if fail_on_deploy_failure is None else fail_on_deploy_failure
        ),
        deploy_wait_minutes=settings.deploy_wait_minutes,
        command_timeout=settings.command_timeout_seconds,
        pmd_rules=_resolve(root, settings.path_pmd_rules),
        filters={APEX_FILTER: settings.apex_extension, JS_FILTER: settings.js_extension},
        paths=ArtifactPaths(
            diff=_resolve(root, settings.path_diff),
            pmd_list=_resolve(root, settings.path_pmd_list),
            js_list=_resolve(root, settings.path_js_list),
            results=_resolve(root, settings.path_results),
            delta_output=_resolve(root, settings.path_delta_output),
        ),
        commands=ToolCommands(
            pmd=tuple(shlex.split(settings.cmd_pmd)),
            eslint=tuple(shlex.split(settings.cmd_eslint)),
        ),
    )


__all__ = [
    "DEFAULT_ENV_FILE",
    "SGD_PLUGIN",
    "ArtifactPaths",
    "RunConfig",
    "Settings",
    "ToolCommands",
    "build_run_config",
    "load_settings",
]
