# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for temporary artifact removal."""

from __future__ import annotations

from pathlib import Path

from conftest import RecordingLogger
from pr_validate.cleanup import discard_artifacts


def test_removes_files_and_directories(tmp_path: Path, recording_logger: RecordingLogger) -> None:
    diff = tmp_path / "diff.txt"
    diff.write_text("M\ta.cls\n", encoding="utf-8")
    delta = tmp_path / "deploy_delta" / "package"
    delta.mkdir(parents=True)
    (delta / "package.xml").write_text("<Package/>", encoding="utf-8")

    targets = [diff, tmp_path / "deploy_delta", tmp_path / "absent.txt"]

    result = discard_artifacts(targets, root=tmp_path, logger=recording_logger)

    assert not diff.exists()
    assert not (tmp_path / "deploy_delta").exists()
    assert result.removed == [diff, tmp_path / "deploy_delta"]
    assert result.failed == []


def test_refuses_to_remove_root_or_git_directory(tmp_path: Path, recording_logger: RecordingLogger) -> None:
    git_dir = tmp_path / ".git"
    git_dir.mkdir()

    result = discard_artifacts([tmp_path, git_dir], root=tmp_path, logger=recording_logger)

    assert tmp_path.exists()
    assert git_dir.exists()
    assert result.failed == [tmp_path, git_dir]
    assert len(recording_logger.of("warn")) == 2
