# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for CLI output."""

from __future__ import annotations

import sys
from functools import lru_cache

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


class RichConsoleManager:
    """Hand out one Rich :class:`Console` per presentation profile.

    Consoles never bind a stream, so output follows ``sys.stdout`` even when
    it is swapped after the console was created (for example by a test
    runner capturing output).
    """

    def __init__(self) -> None:
        self._consoles: dict[tuple[bool, bool, bool], Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console for the ``color`` and ``emoji`` preferences.

        Colour is only emitted when stdout is a terminal; otherwise the
        console renders plain text suitable for logs and pipes.
        """

        tty = detect_tty()
        styled = color and tty
        key = (styled, emoji, tty)
        console = self._consoles.get(key)
        if console is None:
            console = Console(
                color_system="auto" if styled else None,
                force_terminal=tty,
                no_color=not styled,
                emoji=emoji,
                soft_wrap=True,
            )
            self._consoles[key] = console
        return console


@lru_cache(maxsize=1)
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager`."""

    return RichConsoleManager()


__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager"]
