# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich consoles bound to the current standard output."""

from __future__ import annotations

import sys
from functools import cache
from typing import TextIO

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@cache
def _console(stream: TextIO, *, styled: bool, emoji: bool, tty: bool) -> Console:
    return Console(
        file=stream,
        color_system="auto" if styled else None,
        force_terminal=tty,
        no_color=not styled,
        emoji=emoji,
        highlight=False,
        soft_wrap=True,
    )


def get_console(*, color: bool, emoji: bool) -> Console:
    """Return a console writing to the current ``sys.stdout``.

    Colour is only emitted when ``color`` is requested and stdout is a
    terminal. Consoles are reused per stream so redirection (for example
    under a test runner) picks up a fresh one.

    Args:
        color: ``True`` when ANSI colour output is allowed.
        emoji: ``True`` when Rich should render emoji glyphs.

    Returns:
        Console: Console matching the presentation flags.
    """

    tty = detect_tty()
    return _console(sys.stdout, styled=color and tty, emoji=emoji, tty=tty)


__all__ = ["detect_tty", "get_console"]
