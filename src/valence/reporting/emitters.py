# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Emit machine-readable and Markdown reports for validation runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from ..errors import ReportGenerationError
from ..filtering import HIGH_CONFIDENCE, MEDIUM_CONFIDENCE, confidence_band
from ..models import Report, ValidationResult, Violation
from ..severity import severity_icon, severity_to_sarif
from .builder import canonical_view, report_payload

SARIF_VERSION: Final[str] = "2.1.0"
SARIF_SCHEMA: Final[str] = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0.json"
TOOL_NAME: Final[str] = "valence"


def write_json_report(report: Report, path: Path) -> None:
    """Write the canonical JSON artifact for ``report``."""

    path.write_text(json.dumps(report_payload(report), indent=2) + "\n", encoding="utf-8")


def load_json_report(path: Path) -> Report:
    """Parse a JSON artifact written by :func:`write_json_report`.

    Raises:
        ReportGenerationError: If the file cannot be read or is not a report.
    """

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return Report.model_validate(payload)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ReportGenerationError(f"Failed to load report from {path}: {exc}") from exc


def write_sarif_report(report: Report, path: Path) -> None:
    """Emit a SARIF document compatible with GitHub code scanning.

    Violations hidden by overrides are included with an ``external``
    suppression carrying the override reason.
    """

    view = canonical_view(report)
    rules: dict[str, dict[str, object]] = {}
    results: list[dict[str, object]] = []
    for result in view.results:
        for violation in (*result.violations, *result.suppressed):
            if violation.rule not in rules:
                rules[violation.rule] = {
                    "id": violation.rule,
                    "name": violation.rule,
                    "shortDescription": {"text": violation.message[:120]},
                    "properties": {"validator": result.validator},
                }
            results.append(_sarif_result(result, violation))

    sarif_doc = {
        "version": SARIF_VERSION,
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": view.metadata.tool_version or "unknown",
                        "rules": list(rules.values()),
                    },
                },
                "results": results,
            },
        ],
    }
    path.write_text(json.dumps(sarif_doc, indent=2), encoding="utf-8")


def _sarif_result(result: ValidationResult, violation: Violation) -> dict[str, object]:
    entry: dict[str, object] = {
        "ruleId": violation.rule,
        "level": severity_to_sarif(violation.severity),
        "message": {"text": violation.message},
        "properties": {
            "validator": result.validator,
            "confidence": violation.confidence,
        },
    }
    if violation.file_path:
        physical_location: dict[str, object] = {"artifactLocation": {"uri": violation.file_path}}
        if violation.line is not None:
            physical_location["region"] = {"startLine": violation.line}
        entry["locations"] = [{"physicalLocation": physical_location}]
    if violation.code_hash:
        entry["partialFingerprints"] = {"valenceCodeHash/v1": violation.code_hash}
    if violation.suppression is not None:
        entry["suppressions"] = [{"kind": "external", "justification": violation.suppression.reason}]
    return entry


def render_markdown(report: Report, *, low_confidence_threshold: float = MEDIUM_CONFIDENCE) -> str:
    """Render ``report`` as a Markdown document.

    Args:
        report: Report to render.
        low_confidence_threshold: Violations below this confidence are flagged
            for manual review.

    Returns:
        str: Markdown text ending with a newline.
    """

    view = canonical_view(report)
    metadata = view.metadata
    lines = [
        "# Validation Report",
        "",
        f"**Generated:** {metadata.generated_at.isoformat()}",
        f"**Files Analyzed:** {metadata.files_analyzed}",
    ]
    if metadata.profile:
        lines.append(f"**Profile:** {metadata.profile}")
    threshold = "disabled" if metadata.confidence_threshold is None else f"{metadata.confidence_threshold:.2f}"
    lines.extend([f"**Confidence Threshold:** {threshold}", "", "## Summary", ""])
    lines.append(f"- ✅ **Passed:** {view.passed_count} validators")
    lines.append(f"- ❌ **Failed:** {view.failed_count} validators")
    lines.append(f"- 🔍 **Total Violations:** {view.violation_count}")
    low_count = view.low_confidence_count(low_confidence_threshold)
    if low_count:
        lines.append(f"- ⚠️ **Low Confidence:** {low_count} (may need manual review)")
    if view.suppressed_count:
        lines.append(f"- 🔕 **Suppressed by Overrides:** {view.suppressed_count}")
    if view.filtered_count:
        lines.append(f"- 🧹 **Below Confidence Threshold:** {view.filtered_count}")
    lines.extend(["", "## Validation Results", ""])

    failed = [result for result in view.results if not result.passed]
    passed = [result for result in view.results if result.passed]
    if failed:
        lines.extend(["### ❌ Failed Validators", ""])
        for result in failed:
            lines.extend(_markdown_result(result, low_confidence_threshold))
    if passed:
        lines.extend(["### ✅ Passed Validators", ""])
        for result in passed:
            lines.extend(_markdown_result(result, low_confidence_threshold))

    if view.violation_count:
        lines.extend(_markdown_confidence_analysis(view.all_violations(), low_confidence_threshold))
    return "\n".join(lines).rstrip() + "\n"


def _markdown_result(result: ValidationResult, low_confidence_threshold: float) -> list[str]:
    lines = [
        f"#### `{result.validator}`",
        f"- **Name:** {result.display_name}",
        f"- **Status:** {'✅ PASS' if result.passed else '❌ FAIL'}",
        f"- **Message:** {result.message}",
    ]
    if result.error:
        lines.append(f"- **Error:** {result.error}")
    if result.violations:
        lines.extend([f"- **Violations:** {len(result.violations)}", ""])
        for index, violation in enumerate(result.violations, start=1):
            lines.append(f"**Violation {index}:**")
            lines.extend(_markdown_violation(violation, low_confidence_threshold))
            lines.append("")
    for detail in result.details:
        lines.append(f"- {detail}")
    if result.suppressed:
        lines.append(f"- **Suppressed by Overrides:** {len(result.suppressed)}")
    if result.filtered_count:
        lines.append(f"- **Below Confidence Threshold:** {result.filtered_count} (filtered out)")
    lines.extend(["", "---", ""])
    return lines


def _markdown_violation(violation: Violation, low_confidence_threshold: float) -> list[str]:
    lines = [
        f"- {severity_icon(violation.severity)} **{violation.rule}** (Confidence: {violation.confidence:.0%})",
        f"- **Message:** {violation.message}",
    ]
    if violation.file_path:
        location = violation.file_path if violation.line is None else f"{violation.file_path}:{violation.line}"
        lines.append(f"- **Location:** `{location}`")
    if violation.code:
        lines.append(f"- **Code:** `{violation.code}`")
    if violation.confidence < low_confidence_threshold:
        lines.append("- ⚠️ *This rule may require manual verification.*")
    if violation.auto_fix_suggestion:
        lines.append(f"- **💡 Suggested Fix:** `{violation.auto_fix_suggestion}`")
    if violation.impact:
        lines.append(f"- **Impact:** {violation.impact}")
    return lines


def _markdown_confidence_analysis(violations: list[Violation], low_confidence_threshold: float) -> list[str]:
    total = len(violations)
    bands = {"high": 0, "medium": 0, "low": 0}
    for violation in violations:
        bands[confidence_band(violation.confidence)] += 1
    lines = [
        "## Confidence Analysis",
        "",
        "| Confidence Level | Count | Percentage |",
        "|------------------|-------|------------|",
        f"| High (≥{HIGH_CONFIDENCE:.0%}) | {bands['high']} | {bands['high'] / total:.1%} |",
        f"| Medium ({MEDIUM_CONFIDENCE:.0%}-{HIGH_CONFIDENCE:.0%}) | {bands['medium']} | {bands['medium'] / total:.1%} |",
        f"| Low (<{MEDIUM_CONFIDENCE:.0%}) | {bands['low']} | {bands['low'] / total:.1%} |",
        "",
    ]
    review = sum(1 for violation in violations if violation.confidence < low_confidence_threshold)
    if review:
        lines.extend([f"⚠️ **{review} violations have low confidence** and may require manual verification.", ""])
    return lines


def write_markdown_report(
    report: Report,
    path: Path,
    *,
    low_confidence_threshold: float = MEDIUM_CONFIDENCE,
) -> None:
    """Write :func:`render_markdown` output to ``path``."""

    path.write_text(render_markdown(report, low_confidence_threshold=low_confidence_threshold), encoding="utf-8")


__all__ = [
    "SARIF_SCHEMA",
    "SARIF_VERSION",
    "load_json_report",
    "render_markdown",
    "write_json_report",
    "write_markdown_report",
    "write_sarif_report",
]
