# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Aggregate report file and console summary of stage outcomes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Final

from rich import box
from rich.table import Table

from .console import get_console

REPORT_TITLE: Final[str] = "Code Validation Summary"
SEPARATOR: Final[str] = "-----------------------------"


@dataclass(slots=True, frozen=True)
class StageResult:
    """Outcome of one external stage; ``output`` is appended to the report regardless of ``ok``."""

    name: str
    ok: bool
    output: str = ""
    skipped: bool = False

    @property
    def status_label(self) -> str:
        """Return a short label for the summary table."""

        if self.skipped:
            return "skipped"
        return "passed" if self.ok else "failed"


class ReportWriter:
    """Write the plain-text aggregate report section by section."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return the report location."""

        return self._path

    def start(self, *, generated_at: datetime | None = None) -> None:
        """Truncate the report and write its header."""

        timestamp = (generated_at or datetime.now().astimezone()).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(f"{REPORT_TITLE}\nGenerated at: {timestamp}\n{SEPARATOR}\n", encoding="utf-8")

    def append_section(self, title: str, body: str) -> None:
        """Append a ``### title ###`` block followed by ``body``."""

        text = body if body.endswith("\n") or not body else f"{body}\n"
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"\n\n### {title} ###\n\n{text}")

    def append_result(self, title: str, result: StageResult) -> None:
        """Append the captured output of ``result`` under ``title``."""

        body = result.output if result.output.strip() else f"{result.name} produced no output ({result.status_label})."
        self.append_section(title, body)


def build_summary_table(results: Sequence[StageResult]) -> Table:
    """Return a Rich table listing each stage and its outcome."""

    table = Table(title="Validation stages", box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("Stage", style="bold")
    table.add_column("Result")
    styles = {"passed": "green", "failed": "red", "skipped": "dim"}
    for result in results:
        label = result.status_label
        table.add_row(result.name, f"[{styles[label]}]{label}[/{styles[label]}]")
    return table


def emit_summary(results: Sequence[StageResult], *, use_color: bool, use_emoji: bool) -> None:
    """Print the stage summary table."""

    if not results:
        return
    console = get_console(color=use_color, emoji=use_emoji)
    console.print(build_summary_table(results))


__all__ = [
    "REPORT_TITLE",
    "ReportWriter",
    "SEPARATOR",
    "StageResult",
    "build_summary_table",
    "emit_summary",
]
