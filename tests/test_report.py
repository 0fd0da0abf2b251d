# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the aggregate report writer."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

from pr_validate.report import ReportWriter, StageResult, build_summary_table


def test_start_truncates_previous_report(tmp_path: Path) -> None:
    path = tmp_path / "results.txt"
    path.write_text("stale content\n", encoding="utf-8")

    ReportWriter(path).start(generated_at=datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc))

    assert path.read_text(encoding="utf-8") == (
        "Code Validation Summary\nGenerated at: 2025-06-01 12:00:00 UTC\n-----------------------------\n"
    )


def test_sections_are_appended_in_order(tmp_path: Path) -> None:
    writer = ReportWriter(tmp_path / "reports" / "results.txt")
    writer.start()
    writer.append_section("PMD REPORTS (APEX)", "violation one")
    writer.append_result("ESLINT REPORTS (JS)", StageResult(name="ESLint (JS)", ok=False, output="2 problems\n"))

    text = writer.path.read_text(encoding="utf-8")
    assert text.index("### PMD REPORTS (APEX) ###") < text.index("### ESLINT REPORTS (JS) ###")
    assert "violation one\n" in text
    assert "2 problems\n" in text


def test_empty_output_gets_placeholder(tmp_path: Path) -> None:
    writer = ReportWriter(tmp_path / "results.txt")
    writer.start()
    writer.append_result("DEPLOY VALIDATION", StageResult(name="Deploy validation", ok=True))

    assert "Deploy validation produced no output (passed)." in writer.path.read_text(encoding="utf-8")


def test_summary_table_lists_stage_outcomes() -> None:
    table = build_summary_table(
        [
            StageResult(name="PMD (Apex)", ok=False),
            StageResult(name="ESLint (JS)", ok=True, skipped=True),
            StageResult(name="Deploy validation", ok=True),
        ]
    )
    console = Console(record=True, width=80, color_system=None)
    console.print(table)
    rendered = console.export_text()

    assert "PMD (Apex)" in rendered
    assert "failed" in rendered
    assert "skipped" in rendered
    assert "passed" in rendered
