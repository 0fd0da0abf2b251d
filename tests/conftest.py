# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from pr_validate.config import RunConfig, Settings, build_run_config
from pr_validate.process import CommandOutcome

Response = CommandOutcome | BaseException | Callable[[Sequence[str]], CommandOutcome]


@dataclass(frozen=True)
class RecordedCall:
    args: tuple[str, ...]
    cwd: Path
    stream: bool
    input_text: str | None


@dataclass
class FakeExecutor:
    """Command executor returning scripted outcomes keyed by argument prefix."""

    responses: list[tuple[tuple[str, ...], Response]] = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def on(self, *prefix: str, response: Response) -> None:
        self.responses.append((prefix, response))

    def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        stream: bool = False,
        input_text: str | None = None,
    ) -> CommandOutcome:
        self.calls.append(RecordedCall(tuple(args), cwd, stream, input_text))
        for prefix, response in self.responses:
            if tuple(args[: len(prefix)]) != prefix:
                continue
            if isinstance(response, BaseException):
                raise response
            if callable(response):
                return response(args)
            return response
        return CommandOutcome(returncode=0)

    def commands(self) -> list[tuple[str, ...]]:
        return [call.args for call in self.calls]

    def called(self, *prefix: str) -> bool:
        return any(call.args[: len(prefix)] == prefix for call in self.calls)


@dataclass
class RecordingLogger:
    """Logger capturing messages per level."""

    messages: list[tuple[str, str]] = field(default_factory=list)

    def step(self, title: str) -> None:
        self.messages.append(("step", title))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def ok(self, message: str) -> None:
        self.messages.append(("ok", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def fail(self, message: str) -> None:
        self.messages.append(("fail", message))

    def verbose(self, message: str) -> None:
        self.messages.append(("verbose", message))

    def of(self, level: str) -> list[str]:
        return [message for kind, message in self.messages if kind == level]


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., RunConfig]:
    """Return a factory building a :class:`RunConfig` rooted at ``tmp_path``."""

    def _factory(**overrides: object) -> RunConfig:
        settings = Settings(_env_file=None)
        return build_run_config(settings, root=tmp_path, **overrides)

    return _factory
