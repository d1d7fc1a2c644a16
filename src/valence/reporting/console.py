# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Console rendering of validation reports."""

from __future__ import annotations

from rich.console import Console

from ..console import get_console_manager
from ..filtering import MEDIUM_CONFIDENCE
from ..models import Report
from .builder import canonical_view
from .presenters import build_report_renderable


def render_console(
    report: Report,
    *,
    console: Console | None = None,
    color: bool = True,
    emoji: bool = True,
    show_suppressed: bool = False,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> None:
    """Print ``report`` as Rich tables followed by a summary panel.

    Args:
        report: Report to render.
        console: Console to print to; the shared console when omitted.
        color: Whether colour output is desired.
        emoji: Whether severity markers render as emoji.
        show_suppressed: Whether to list violations hidden by overrides.
        low_confidence_threshold: Violations below this confidence are marked for review.
    """

    target = console or get_console_manager().get(color=color, emoji=emoji)
    target.print(
        build_report_renderable(
            canonical_view(report),
            emoji=emoji,
            show_suppressed=show_suppressed,
            low_confidence_threshold=low_confidence_threshold,
        ),
    )


__all__ = ["render_console"]
