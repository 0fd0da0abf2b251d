# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the subprocess wrappers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pr_validate.process import (
    TIMEOUT_EXIT_CODE,
    CommandOptions,
    CommandOutcome,
    SubprocessExecutor,
    run_command,
    stream_command,
)

PRINT_BOTH = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"


def test_run_command_captures_streams_separately(tmp_path: Path) -> None:
    completed = run_command([sys.executable, "-c", PRINT_BOTH], options=CommandOptions(cwd=tmp_path))

    assert completed.returncode == 3
    assert completed.stdout.strip() == "out"
    assert completed.stderr.strip() == "err"


def test_run_command_timeout_maps_to_exit_code(tmp_path: Path) -> None:
    completed = run_command(
        [sys.executable, "-c", "import time; time.sleep(5)"],
        options=CommandOptions(cwd=tmp_path, timeout=0.2),
    )

    assert completed.returncode == TIMEOUT_EXIT_CODE
    assert "timed out" in completed.stderr


def test_missing_executable_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError, match="was not found on PATH"):
        run_command(["definitely-not-a-real-tool-xyz"])


def test_run_command_passes_stdin(tmp_path: Path) -> None:
    completed = run_command(
        [sys.executable, "-c", "import sys; print(sys.stdin.read().strip().upper())"],
        options=CommandOptions(cwd=tmp_path, input_text="y\n"),
    )

    assert completed.stdout.strip() == "Y"


def test_stream_command_forwards_merged_lines(tmp_path: Path) -> None:
    seen: list[str] = []
    completed = stream_command(
        [sys.executable, "-c", PRINT_BOTH],
        sink=seen.append,
        options=CommandOptions(cwd=tmp_path),
    )

    assert completed.returncode == 3
    assert sorted(line.strip() for line in seen) == ["err", "out"]
    assert completed.stdout == "".join(seen)


def test_executor_streams_through_sink(tmp_path: Path) -> None:
    seen: list[str] = []
    executor = SubprocessExecutor(sink=seen.append)

    outcome = executor([sys.executable, "-c", "print('live')"], cwd=tmp_path, stream=True)

    assert outcome.ok
    assert seen == ["live\n"]
    assert outcome.output == "live\n"


def test_outcome_output_merges_stdout_and_stderr() -> None:
    outcome = CommandOutcome(returncode=1, stdout="violations", stderr="warning")

    assert outcome.output == "violations\nwarning"
    assert not outcome.ok


LATIN1_FINDING = "import sys; sys.stdout.buffer.write(b'Foo.cls: caf\\xe9 violation\\n'); sys.exit(4)"


def test_captured_output_with_invalid_utf8_is_replaced(tmp_path: Path) -> None:
    outcome = SubprocessExecutor()([sys.executable, "-c", LATIN1_FINDING], cwd=tmp_path)

    assert outcome.returncode == 4
    assert outcome.stdout == "Foo.cls: caf\ufffd violation\n"


def test_streamed_output_with_invalid_utf8_is_replaced(tmp_path: Path) -> None:
    seen: list[str] = []
    outcome = SubprocessExecutor(sink=seen.append)([sys.executable, "-c", LATIN1_FINDING], cwd=tmp_path, stream=True)

    assert outcome.returncode == 4
    assert seen == ["Foo.cls: caf\ufffd violation\n"]


def test_stream_command_timeout_maps_to_exit_code(tmp_path: Path) -> None:
    completed = stream_command(
        [sys.executable, "-c", "import time; print('started', flush=True); time.sleep(5)"],
        sink=lambda _line: None,
        options=CommandOptions(cwd=tmp_path, timeout=0.5),
    )

    assert completed.returncode == TIMEOUT_EXIT_CODE
    assert completed.stdout == "started\n"
    assert "timed out" in completed.stderr
