# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Report building and rendering."""

from __future__ import annotations

from .builder import build_report, canonical_view, report_payload
from .console import render_console
from .emitters import (
    load_json_report,
    render_markdown,
    write_json_report,
    write_markdown_report,
    write_sarif_report,
)
from .generate import REPORT_FILENAMES, generate_reports
from .html import render_html, write_html_report

__all__ = [
    "REPORT_FILENAMES",
    "build_report",
    "canonical_view",
    "generate_reports",
    "load_json_report",
    "render_console",
    "render_html",
    "render_markdown",
    "report_payload",
    "write_html_report",
    "write_json_report",
    "write_markdown_report",
    "write_sarif_report",
]
