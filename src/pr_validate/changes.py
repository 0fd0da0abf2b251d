# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Classify ``git diff --name-status`` records and route them to analyzers.

Each diff line carries a status token (``A``, ``M``, ``D``, ``R095``,
``C080`` ...) followed by one path, or two paths for renames and copies.
Deleted files are dropped, renames and copies are routed by their new path,
and every surviving path is matched against the configured extension
filters independently so additional analyzers can be added without touching
the routing rules.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

APEX_FILTER: Final[str] = "apex"
JS_FILTER: Final[str] = "js"
DEFAULT_FILTERS: Final[Mapping[str, str]] = {APEX_FILTER: ".cls", JS_FILTER: ".js"}

_STATUS_TOKEN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z]\d*")


class ChangeStatus(str, Enum):
    """Enumerate the git status letters the router understands."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNKNOWN = "?"

    @classmethod
    def from_token(cls, token: str) -> ChangeStatus:
        """Return the status matching the leading letter of ``token``.

        Args:
            token: Raw status token such as ``M`` or ``R100``.

        Returns:
            ChangeStatus: Matching member, or ``UNKNOWN`` for unrecognised letters.
        """

        letter = token[:1].upper()
        for member in cls:
            if member is not cls.UNKNOWN and member.value == letter:
                return member
        return cls.UNKNOWN

    @property
    def carries_two_paths(self) -> bool:
        """Return ``True`` for statuses reported as ``old<TAB>new``."""

        return self in {ChangeStatus.RENAMED, ChangeStatus.COPIED}


@dataclass(slots=True, frozen=True)
class ChangeRecord:
    """One changed path (or path pair) reported by git."""

    status: ChangeStatus
    paths: tuple[str, ...]
    raw_status: str = ""

    @property
    def similarity(self) -> int | None:
        """Return the similarity score attached to rename/copy tokens, if any."""

        digits = self.raw_status[1:]
        return int(digits) if digits.isdigit() else None

    @property
    def effective_path(self) -> str | None:
        """Return the path that still exists after the change.

        Returns:
            str | None: ``None`` for deletions, the new path for renames and
            copies, otherwise the single reported path.
        """

        if self.status is ChangeStatus.DELETED:
            return None
        return self.paths[-1]


@dataclass(slots=True)
class ParsedChanges:
    """Records parsed from diff output plus warnings for skipped lines."""

    records: list[ChangeRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class RoutingResult:
    """Per-analyzer file lists, each kept in diff order."""

    buckets: Mapping[str, tuple[str, ...]]

    def files_for(self, name: str) -> tuple[str, ...]:
        """Return the files routed to filter ``name`` (empty when unknown)."""

        return self.buckets.get(name, ())

    @property
    def apex_files(self) -> tuple[str, ...]:
        """Return files routed to the Apex static analyzer."""

        return self.files_for(APEX_FILTER)

    @property
    def js_files(self) -> tuple[str, ...]:
        """Return files routed to the JavaScript linter."""

        return self.files_for(JS_FILTER)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when no filter received any file."""

        return not any(self.buckets.values())


def _build_record(token: str, paths: tuple[str, ...]) -> ChangeRecord | None:
    if not token or not paths:
        return None
    status = ChangeStatus.from_token(token)
    if status.carries_two_paths and len(paths) != 2:
        return None
    if not status.carries_two_paths and status is not ChangeStatus.UNKNOWN and len(paths) != 1:
        return None
    return ChangeRecord(status=status, paths=paths, raw_status=token)


def parse_change_record(line: str) -> ChangeRecord | None:
    """Parse a single ``<status>\\t<path>[\\t<path>]`` line.

    Args:
        line: Raw line emitted by ``git diff --name-status``.

    Returns:
        ChangeRecord | None: Parsed record, or ``None`` when the line is
        malformed (missing status or paths, or a rename without two paths).
    """

    fields = line.rstrip("\r\n").split("\t")
    return _build_record(fields[0].strip(), tuple(path for path in fields[1:] if path))


def parse_change_records(lines: Iterable[str]) -> ParsedChanges:
    """Parse diff output lines into :class:`ChangeRecord` objects.

    Blank lines are ignored; malformed lines are skipped and reported in
    :attr:`ParsedChanges.warnings`.

    Args:
        lines: Raw ``--name-status`` lines.

    Returns:
        ParsedChanges: Parsed records in input order plus parse warnings.
    """

    parsed = ParsedChanges()
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        record = parse_change_record(line)
        if record is None:
            parsed.warnings.append(f"line {number}: unable to parse change record {line.strip()!r}")
            continue
        parsed.records.append(record)
    return parsed


def parse_name_status_z(payload: str) -> ParsedChanges:
    """Parse ``git diff --name-status -z`` output.

    Fields are NUL-terminated and paths are never quoted, so names holding
    quotes, backslashes, tabs or newlines survive intact. A status token is
    followed by two path fields for renames and copies and one otherwise.

    Args:
        payload: Raw NUL-separated diff output.

    Returns:
        ParsedChanges: Parsed records in input order plus parse warnings.
    """

    parsed = ParsedChanges()
    fields = payload.split("\0")
    if fields and fields[-1] == "":
        fields.pop()
    index = 0
    entry = 0
    while index < len(fields):
        entry += 1
        token = fields[index].strip()
        if not _STATUS_TOKEN.fullmatch(token):
            parsed.warnings.append(f"entry {entry}: unexpected status field {fields[index]!r}")
            index += 1
            continue
        width = 2 if ChangeStatus.from_token(token).carries_two_paths else 1
        paths = tuple(fields[index + 1 : index + 1 + width])
        index += 1 + width
        record = _build_record(token, tuple(path for path in paths if path)) if len(paths) == width else None
        if record is None:
            parsed.warnings.append(f"entry {entry}: unable to parse change record {token!r} {list(paths)!r}")
            continue
        parsed.records.append(record)
    return parsed


def format_change_record(record: ChangeRecord) -> str:
    """Render ``record`` as a tab-separated ``--name-status`` line."""

    return "\t".join((record.raw_status, *record.paths))


def classify(
    records: Sequence[ChangeRecord],
    filters: Mapping[str, str] = DEFAULT_FILTERS,
) -> RoutingResult:
    """Route change records to per-analyzer file lists by extension.

    Args:
        records: Change records in diff order.
        filters: Mapping of filter name to the path suffix it accepts.

    Returns:
        RoutingResult: Files per filter, preserving input order.
    """

    buckets: dict[str, list[str]] = {name: [] for name in filters}
    for record in records:
        path = record.effective_path
        if path is None:
            continue
        for name, suffix in filters.items():
            if path.endswith(suffix):
                buckets[name].append(path)
    return RoutingResult(buckets={name: tuple(paths) for name, paths in buckets.items()})


__all__ = [
    "APEX_FILTER",
    "DEFAULT_FILTERS",
    "JS_FILTER",
    "ChangeRecord",
    "ChangeStatus",
    "ParsedChanges",
    "RoutingResult",
    "classify",
    "format_change_record",
    "parse_change_record",
    "parse_change_records",
    "parse_name_status_z",
]
