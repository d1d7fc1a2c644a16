# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status lines and section headers printed to the user."""

from __future__ import annotations

from enum import Enum

from rich.rule import Rule
from rich.text import Text

from .console import detect_tty, get_console_manager


class Status(Enum):
    """Kinds of status line, each with its marker and colour."""

    INFO = ("ℹ️ ", "cyan")
    OK = ("✅ ", "green")
    WARN = ("⚠️ ", "yellow")
    FAIL = ("❌ ", "red")

    @property
    def marker(self) -> str:
        return self.value[0]

    @property
    def style(self) -> str:
        return self.value[1]


def status_line(status: Status, message: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``message`` prefixed and coloured according to ``status``.

    Args:
        status: Kind of line to print.
        message: Text shown to the user; Rich markup is not interpreted.
        use_emoji: Whether to prefix the status marker.
        use_color: Explicit colour preference; TTY detection decides when ``None``.
    """

    colored = detect_tty() if use_color is None else use_color
    text = Text(f"{status.marker if use_emoji else ''}{message}")
    if colored:
        text.stylize(status.style)
    get_console_manager().get(color=colored, emoji=use_emoji).print(text)


def section(title: str, *, use_color: bool) -> None:
    """Print a header separating blocks of output."""

    console = get_console_manager().get(color=use_color, emoji=True)
    console.print()
    console.print(Rule(title) if use_color else f"=== {title} ===")


__all__ = ["Status", "section", "status_line"]
