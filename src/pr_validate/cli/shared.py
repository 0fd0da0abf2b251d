# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for the CLI layer (logging adapter, errors)."""

from __future__ import annotations

from dataclasses import dataclass

from ..console import detect_tty
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import section as core_section
from ..logging import verbose as core_verbose
from ..logging import warn as core_warn


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI presentation settings."""

    use_emoji: bool = True
    use_color: bool | None = None
    verbose_enabled: bool = False

    def step(self, title: str) -> None:
        """Render a step heading.

        Args:
            title: Step heading shown inside a horizontal rule.
        """

        color = detect_tty() if self.use_color is None else self.use_color
        core_section(title, use_emoji=self.use_emoji, use_color=color)

    def info(self, message: str) -> None:
        """Log an informational message honouring emoji preferences.

        Args:
            message: Text describing progress.
        """

        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences.

        Args:
            message: Text describing the successful state.
        """

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences.

        Args:
            message: Text describing the warning condition.
        """

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences.

        Args:
            message: Text describing the failure state.
        """

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def verbose(self, message: str) -> None:
        """Emit ``message`` only when ``--verbose`` was supplied.

        Args:
            message: Detail useful when diagnosing a run.
        """

        if self.verbose_enabled:
            core_verbose(message, use_emoji=self.use_emoji, use_color=self.use_color)


def build_cli_logger(*, emoji: bool, color: bool, verbose: bool = False) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided presentation flags.

    Colour is only emitted when stdout is a terminal.

    Args:
        emoji: Whether log output may include emoji glyphs.
        color: Whether terminal colour output is allowed.
        verbose: Whether ``[verbose]`` messages are shown.

    Returns:
        CLILogger: Logger honouring the flags.
    """

    return CLILogger(use_emoji=emoji, use_color=None if color else False, verbose_enabled=verbose)


__all__ = ["CLIError", "CLILogger", "build_cli_logger"]
