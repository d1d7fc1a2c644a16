# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""HTML rendering produced by exporting a recorded Rich console."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Final

from rich.console import Console
from rich.terminal_theme import MONOKAI

from ..filtering import MEDIUM_CONFIDENCE
from ..models import Report
from .builder import canonical_view
from .presenters import build_report_renderable

HTML_WIDTH: Final[int] = 140


def render_html(report: Report, *, low_confidence_threshold: float = MEDIUM_CONFIDENCE) -> str:
    """Return a standalone HTML document rendering ``report``."""

    console = Console(
        record=True,
        file=io.StringIO(),
        width=HTML_WIDTH,
        force_terminal=True,
        color_system="truecolor",
    )
    view = canonical_view(report)
    console.rule(f"Validation Report ({view.metadata.generated_at.isoformat()})")
    console.print(
        build_report_renderable(
            view,
            emoji=True,
            show_suppressed=True,
            low_confidence_threshold=low_confidence_threshold,
        ),
    )
    return console.export_html(theme=MONOKAI, inline_styles=True)


def write_html_report(
    report: Report,
    path: Path,
    *,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> None:
    """Write :func:`render_html` output to ``path``."""

    path.write_text(render_html(report, low_confidence_threshold=low_confidence_threshold), encoding="utf-8")


__all__ = ["render_html", "write_html_report"]
