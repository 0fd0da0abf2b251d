# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution.

Output is decoded as UTF-8 with undecodable bytes replaced, so a stray
Latin-1 byte in a filename or a tool message never aborts the run.
"""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; every external tool goes through
# this wrapper, which resolves executables and never enables ``shell=True``.
import subprocess  # nosec B404
import sys
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final, Protocol

TIMEOUT_EXIT_CODE: Final[int] = 124
OUTPUT_ENCODING: Final[str] = "utf-8"
DECODE_ERRORS: Final[str] = "replace"

OutputSink = Callable[[str], None]


@dataclass(slots=True, frozen=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None
    input_text: str | None = None

@dataclass(slots=True, frozen=True)
class CommandOutcome:
    """Exit status and captured output of a finished command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Return ``True`` when the command exited with status zero."""

        return self.returncode == 0

    @property
    def output(self) -> str:
        """Return stdout followed by stderr, as a shell ``2>&1`` redirect would."""

        if not self.stderr:
            return self.stdout
        if self.stdout and not self.stdout.endswith("\n"):
            return f"{self.stdout}\n{self.stderr}"
        return f"{self.stdout}{self.stderr}"


def _ensure_text(value: str | bytes | None) -> str | None:
    """Return ``value`` decoded to text when supplied as ``bytes``.

    Args:
        value: Stream output captured from subprocess execution.

    Returns:
        str | None: Text output or ``None`` when no data was captured.
    """

    if value is None or isinstance(value, str):
        return value
    return value.decode(OUTPUT_ENCODING, errors=DECODE_ERRORS)


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Validated argument list suitable for subprocess execution.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def _timeout_message(timeout: float | None) -> str:
    return f"Command timed out after {timeout or 0:.1f}s"


def is_available(executable: str) -> bool:
    """Return ``True`` when ``executable`` resolves on ``PATH``."""

    return shutil.which(executable) is not None


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Execute ``args`` capturing stdout and stderr separately.

    A non-zero exit is returned, not raised. When ``options.timeout`` elapses
    the process is killed and reported with :data:`TIMEOUT_EXIT_CODE`.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    normalized = _normalize_args(args)
    resolved_options = options or CommandOptions()

    try:
        return subprocess.run(  # nosec B603 - argument list, no shell
            normalized,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            env=dict(resolved_options.env) if resolved_options.env is not None else None,
            check=False,
            capture_output=True,
            encoding=OUTPUT_ENCODING,
            errors=DECODE_ERRORS,
            timeout=resolved_options.timeout,
            input=resolved_options.input_text,
            stdin=subprocess.DEVNULL if resolved_options.input_text is None else None,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _ensure_text(exc.stdout) or ""
        stderr = _ensure_text(exc.stderr)
        timeout_msg = _timeout_message(resolved_options.timeout)
        return subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_EXIT_CODE,
            stdout=stdout,
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )


def stream_command(
    args: Sequence[str],
    *,
    sink: OutputSink,
    options: CommandOptions | None = None,
) -> CompletedProcess[str]:
    """Execute ``args`` forwarding merged stdout/stderr lines to ``sink`` as they arrive.

    The complete output is also returned in ``stdout`` so callers can persist it.
    When ``options.timeout`` elapses the process is killed and the result
    carries :data:`TIMEOUT_EXIT_CODE` with the timeout notice in ``stderr``.

    Args:
        args: Command and argument sequence to execute.
        sink: Callable receiving each output line, newline included.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Execution metadata with the merged output in ``stdout``.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    normalized = _normalize_args(args)
    resolved_options = options or CommandOptions()
    captured: list[str] = []
    expired = threading.Event()
    with subprocess.Popen(  # nosec B603 - argument list, no shell
        normalized,
        cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
        env=dict(resolved_options.env) if resolved_options.env is not None else None,
        stdin=subprocess.PIPE if resolved_options.input_text is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        encoding=OUTPUT_ENCODING,
        errors=DECODE_ERRORS,
        bufsize=1,
    ) as process:

        def _expire() -> None:
            expired.set()
            process.kill()

        timer = threading.Timer(resolved_options.timeout, _expire) if resolved_options.timeout else None
        if timer is not None:
            timer.start()
        try:
            if resolved_options.input_text is not None and process.stdin is not None:
                process.stdin.write(resolved_options.input_text)
                process.stdin.close()
            if process.stdout is not None:
                for line in process.stdout:
                    captured.append(line)
                    sink(line)
            returncode = process.wait()
        finally:
            if timer is not None:
                timer.cancel()

    stdout = "".join(captured)
    if expired.is_set():
        return subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_EXIT_CODE,
            stdout=stdout,
            stderr=_timeout_message(resolved_options.timeout),
        )
    return subprocess.CompletedProcess(args=list(normalized), returncode=returncode, stdout=stdout, stderr="")


def _write_stdout(line: str) -> None:
    """Write ``line`` to the current ``sys.stdout`` and flush."""

    sys.stdout.write(line)
    sys.stdout.flush()


class CommandExecutor(Protocol):
    """Callable running an external command and reporting its outcome."""

    def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        stream: bool = False,
        input_text: str | None = None,
    ) -> CommandOutcome:
        """Run ``args`` inside ``cwd`` and return the outcome.

        Args:
            args: Command and argument sequence to execute.
            cwd: Working directory for the command.
            stream: Forward output live to the console while capturing it.
            input_text: Optional text written to the command's stdin.

        Returns:
            CommandOutcome: Exit status and captured output.

        Raises:
            FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        """
        ...


class SubprocessExecutor:
    """Default :class:`CommandExecutor` backed by :func:`run_command` and :func:`stream_command`."""

    def __init__(self, *, sink: OutputSink | None = None, timeout: float | None = None) -> None:
        """Create an executor.

        Args:
            sink: Destination for streamed output lines. Defaults to ``sys.stdout``.
            timeout: Seconds after which a command is killed; ``None`` waits indefinitely.
        """

        self._sink = sink or _write_stdout
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        """Return the per-command timeout in seconds."""

        return self._timeout

    def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        stream: bool = False,
        input_text: str | None = None,
    ) -> CommandOutcome:
        """Run ``args`` and convert the completed process into a :class:`CommandOutcome`.

        Args:
            args: Command and argument sequence to execute.
            cwd: Working directory for the command.
            stream: Forward output live through the configured sink.
            input_text: Optional text written to the command's stdin.

        Returns:
            CommandOutcome: Exit status and captured output.
        """

        options = CommandOptions(cwd=cwd, timeout=self._timeout, input_text=input_text)
        if stream:
            completed = stream_command(args, sink=self._sink, options=options)
        else:
            completed = run_command(args, options=options)
        return CommandOutcome(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


__all__ = [
    "CommandExecutor",
    "CommandOptions",
    "CommandOutcome",
    "OutputSink",
    "SubprocessExecutor",
    "TIMEOUT_EXIT_CODE",
    "is_available",
    "run_command",
    "stream_command",
]
