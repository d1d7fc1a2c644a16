# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rich renderables shared by the console and HTML renderings."""

from __future__ import annotations

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..filtering import MEDIUM_CONFIDENCE, confidence_band
from ..models import Report, Violation
from ..severity import severity_icon, severity_style

_BAND_STYLES = {"high": "green", "medium": "yellow", "low": "red"}


def create_summary_panel(report: Report, *, low_confidence_threshold: float = MEDIUM_CONFIDENCE) -> Panel:
    """Create a panel summarising pass/fail counts for ``report``."""

    table = Table(show_header=False, box=box.SIMPLE, pad_edge=False, expand=False)
    table.add_column(style="yellow", justify="left", no_wrap=True)
    table.add_column(style="orange1", justify="right", no_wrap=True)
    metadata = report.metadata
    table.add_row("Files analyzed", str(metadata.files_analyzed))
    table.add_row("Validators", str(len(report.results)))
    table.add_row("- passed", str(report.passed_count))
    table.add_row("- failed", str(report.failed_count))
    table.add_row("Violations", str(report.violation_count))
    table.add_row("- low confidence", str(report.low_confidence_count(low_confidence_threshold)))
    table.add_row("Suppressed", str(report.suppressed_count))
    table.add_row("Filtered", str(report.filtered_count))
    threshold = metadata.confidence_threshold
    table.add_row("Threshold", "disabled" if threshold is None else f"{threshold:.2f}")
    title = "Validation passed" if report.succeeded else "Validation failed"
    return Panel(table, title=title, border_style="green" if report.succeeded else "red", expand=False)


def create_results_table(report: Report) -> Table:
    """Create a table with one row per validator result."""

    table = Table(title="Validators", box=box.SIMPLE_HEAVY, expand=False)
    table.add_column("Validator", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Violations", justify="right")
    table.add_column("Suppressed", justify="right")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Message")
    for result in report.results:
        status = Text("PASS", style="green") if result.passed else Text("FAIL", style="bold red")
        if result.error:
            status = Text("ERROR", style="bold magenta")
        table.add_row(
            result.display_name,
            status,
            str(len(result.violations)),
            str(len(result.suppressed)),
            f"{result.duration_ms:.1f}",
            result.message,
        )
    return table


def create_violations_table(
    violations: list[tuple[str, Violation]],
    *,
    title: str,
    emoji: bool = True,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> Table:
    """Create a table listing ``(validator, violation)`` pairs."""

    table = Table(title=title, box=box.SIMPLE, expand=False)
    table.add_column("Sev", no_wrap=True)
    table.add_column("Rule", no_wrap=True)
    table.add_column("Location", no_wrap=True)
    table.add_column("Conf", justify="right", no_wrap=True)
    table.add_column("Message")
    for validator, violation in violations:
        marker = severity_icon(violation.severity) if emoji else violation.severity.value.upper()
        location = violation.file_path or "<workspace>"
        if violation.line is not None:
            location = f"{location}:{violation.line}"
        confidence = Text(f"{violation.confidence:.0%}", style=_BAND_STYLES[confidence_band(violation.confidence)])
        message = Text(violation.message)
        if violation.confidence < low_confidence_threshold:
            message.append(" (needs manual review)", style="dim")
        if violation.suppression is not None:
            message.append(f" [override: {violation.suppression.reason}]", style="dim")
        table.add_row(
            Text(marker, style=severity_style(violation.severity)),
            f"{validator}/{violation.rule}",
            location,
            confidence,
            message,
        )
    return table


def build_report_renderable(
    report: Report,
    *,
    emoji: bool = True,
    show_suppressed: bool = False,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> RenderableType:
    """Compose the full Rich view of ``report``."""

    parts: list[RenderableType] = [create_results_table(report)]
    active = [(result.validator, violation) for result in report.results for violation in result.violations]
    if active:
        parts.append(
            create_violations_table(
                active,
                title="Violations",
                emoji=emoji,
                low_confidence_threshold=low_confidence_threshold,
            ),
        )
    suppressed = [(result.validator, violation) for result in report.results for violation in result.suppressed]
    if show_suppressed and suppressed:
        parts.append(
            create_violations_table(
                suppressed,
                title="Suppressed by overrides",
                emoji=emoji,
                low_confidence_threshold=low_confidence_threshold,
            ),
        )
    parts.append(create_summary_panel(report, low_confidence_threshold=low_confidence_threshold))
    return Group(*parts)


__all__ = [
    "build_report_renderable",
    "create_results_table",
    "create_summary_panel",
    "create_violations_table",
]
