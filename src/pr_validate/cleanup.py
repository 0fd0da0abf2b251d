# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Removal of the temporary artifacts produced during a run."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .interfaces import RunLogger

PROTECTED_DIRECTORIES: Final[set[str]] = {".git", ".hg", ".svn"}


@dataclass(slots=True)
class CleanResult:
    """Capture the outcome of a cleanup operation."""

    removed: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


def _is_protected(path: Path, root: Path) -> bool:
    """Return whether ``path`` is the root itself or lies inside a VCS directory."""

    resolved = path.resolve()
    if resolved == root.resolve():
        return True
    try:
        relative = resolved.relative_to(root.resolve())
    except ValueError:
        return False
    return any(part in PROTECTED_DIRECTORIES for part in relative.parts)


def discard_artifacts(paths: Iterable[Path], *, root: Path, logger: RunLogger) -> CleanResult:
    """Remove each existing path in ``paths``; directories are removed recursively."""

    result = CleanResult()
    for path in paths:
        if not path.exists() and not path.is_symlink():
            continue
        if _is_protected(path, root):
            logger.warn(f"Refusing to remove protected path {path}")
            result.failed.append(path)
            continue
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except PermissionError:
            logger.warn(f"Permission denied removing {path}")
            result.failed.append(path)
            continue
        logger.verbose(f"Removed {path}")
        result.removed.append(path)
    return result


__all__ = ["CleanResult", "discard_artifacts"]
