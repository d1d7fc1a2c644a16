# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Write the configured set of report artifacts to a directory."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Final

from ..config import DEFAULT_REPORT_FORMATS, ReportFormat
from ..errors import ReportGenerationError
from ..filtering import MEDIUM_CONFIDENCE
from ..models import Report
from .emitters import write_json_report, write_markdown_report, write_sarif_report
from .html import write_html_report

LOGGER = logging.getLogger(__name__)

REPORT_FILENAMES: Final[dict[ReportFormat, str]] = {
    "json": "validation-report.json",
    "markdown": "validation-report.md",
    "html": "validation-report.html",
    "sarif": "validation-report.sarif",
}


def generate_reports(
    report: Report,
    output_dir: Path,
    *,
    formats: Iterable[ReportFormat] = DEFAULT_REPORT_FORMATS,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> dict[ReportFormat, Path]:
    """Write ``report`` in each requested format under ``output_dir``.

    The JSON artifact is always written first; it is the canonical source for
    every other rendering.

    Args:
        report: Report to persist.
        output_dir: Directory receiving the artifacts; created when missing.
        formats: Formats to produce.
        low_confidence_threshold: Threshold used to flag violations for manual review.

    Returns:
        dict[ReportFormat, Path]: Path written for each format.

    Raises:
        ReportGenerationError: If a format is unknown or an artifact cannot be written.
    """

    writers: dict[ReportFormat, Callable[[Report, Path], None]] = {
        "json": write_json_report,
        "markdown": lambda rpt, path: write_markdown_report(
            rpt,
            path,
            low_confidence_threshold=low_confidence_threshold,
        ),
        "html": lambda rpt, path: write_html_report(rpt, path, low_confidence_threshold=low_confidence_threshold),
        "sarif": write_sarif_report,
    }
    requested = list(dict.fromkeys(formats))
    unknown = [fmt for fmt in requested if fmt not in writers]
    if unknown:
        raise ReportGenerationError(f"Unknown report format(s): {', '.join(unknown)}")
    ordered = sorted(requested, key=lambda fmt: fmt != "json")

    written: dict[ReportFormat, Path] = {}
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for fmt in ordered:
            path = output_dir / REPORT_FILENAMES[fmt]
            writers[fmt](report, path)
            written[fmt] = path
            LOGGER.debug("Wrote %s report to %s", fmt, path)
    except OSError as exc:
        raise ReportGenerationError(f"Failed to write reports to {output_dir}: {exc}") from exc
    return written


__all__ = ["REPORT_FILENAMES", "generate_reports"]
