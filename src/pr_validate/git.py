# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Git adapter producing the change records consumed by the router."""

from __future__ import annotations

from pathlib import Path

from .changes import ParsedChanges, parse_name_status_z
from .errors import PreconditionError
from .process import CommandExecutor, CommandOutcome, SubprocessExecutor


class GitDelta:
    """Query git for the branch delta against a remote target branch."""

    def __init__(self, root: Path, *, executor: CommandExecutor | None = None, git: str = "git") -> None:
        """Create a git adapter bound to ``root``.

        Args:
            root: Repository root directory.
            executor: Command executor; defaults to :class:`SubprocessExecutor`.
            git: Git executable name.
        """

        self._root = root
        self._executor = executor or SubprocessExecutor()
        self._git = git

    @property
    def root(self) -> Path:
        """Return the repository root the adapter operates on."""

        return self._root

    def _run(self, *args: str, stream: bool = False) -> CommandOutcome:
        return self._executor([self._git, *args], cwd=self._root, stream=stream)

    def ensure_repository(self) -> None:
        """Raise :class:`PreconditionError` unless ``root`` is a git checkout.

        ``.git`` may be a directory or, for worktrees and submodules, a file.
        """

        if not (self._root / ".git").exists():
            raise PreconditionError(f"{self._root} is not a git repository.")

    def current_branch(self) -> str:
        """Return the checked-out branch name (``HEAD`` when detached).

        Raises:
            PreconditionError: If git cannot resolve ``HEAD``.
        """

        outcome = self._run("rev-parse", "--abbrev-ref", "HEAD")
        if not outcome.ok:
            raise PreconditionError(f"Unable to resolve the current branch: {outcome.output.strip()}")
        return outcome.stdout.strip()

    def fetch_all(self, *, stream: bool = False) -> CommandOutcome:
        """Refresh remote-tracking references with ``git fetch --all``."""

        return self._run("fetch", "--all", stream=stream)

    def remote_ref_exists(self, remote: str, branch: str) -> bool:
        """Return ``True`` when ``refs/remotes/<remote>/<branch>`` exists."""

        outcome = self._run("show-ref", "--verify", "--quiet", f"refs/remotes/{remote}/{branch}")
        return outcome.ok

    def diff_name_status(self, base: str, head: str = "HEAD") -> ParsedChanges:
        """Return the parsed ``--name-status`` records for ``base...head``.

        The three-dot range diffs ``head`` against its merge base with ``base``
        so changes already on the target branch are not reported. Output is
        requested NUL-separated (``-z``) so paths are never C-quoted.

        Args:
            base: Reference the branch is compared against.
            head: Reference holding the proposed changes.

        Returns:
            ParsedChanges: Records in git's output order plus parse warnings.

        Raises:
            PreconditionError: If git rejects the comparison.
        """

        outcome = self._run("diff", "--name-status", "-z", "-M", f"{base}...{head}")
        if not outcome.ok:
            raise PreconditionError(f"git diff against {base} failed: {outcome.output.strip()}")
        return parse_name_status_z(outcome.stdout)


__all__ = ["GitDelta"]
