# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Logging interface shared by the pipeline and the CLI layer."""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class RunLogger(Protocol):
    """Protocol describing the progress messages emitted during a run."""

    __slots__ = ()

    @abstractmethod
    def step(self, title: str) -> None:
        """Announce the start of a numbered pipeline step.

        Args:
            title: Step heading including its position, e.g. ``Step 2/5: ...``.
        """

    @abstractmethod
    def info(self, message: str) -> None:
        """Render an informational ``message``.

        Args:
            message: Message string describing progress.
        """

    @abstractmethod
    def ok(self, message: str) -> None:
        """Render a success ``message``.

        Args:
            message: Message string describing the success condition.
        """

    @abstractmethod
    def warn(self, message: str) -> None:
        """Render a warning ``message``.

        Args:
            message: Message string describing the warning condition.
        """

    @abstractmethod
    def fail(self, message: str) -> None:
        """Render a failure ``message``.

        Args:
            message: Message string describing the failure condition.
        """

    @abstractmethod
    def verbose(self, message: str) -> None:
        """Emit ``message`` only when verbose output is enabled.

        Args:
            message: Message string describing detail useful when debugging.
        """


__all__ = ["RunLogger"]
