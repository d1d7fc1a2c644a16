# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Assemble the canonical report payload for a run."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Final

from .. import __version__
from ..models import Report, RunMetadata, ValidationResult

REPORT_SCHEMA_VERSION: Final[str] = "1.0"


def build_report(
    results: Sequence[ValidationResult],
    *,
    files_analyzed: int,
    confidence_threshold: float | None,
    validators: Iterable[str] | None = None,
    profile: str | None = None,
    overrides_applied: bool = False,
) -> Report:
    """Aggregate the final ``results`` of a run with its metadata.

    Args:
        results: Results after the override and confidence passes.
        files_analyzed: Number of candidate files handed to the validators.
        confidence_threshold: Threshold applied by the confidence filter, if any.
        validators: Validator ids in run order; derived from ``results`` when omitted.
        profile: Name of the profile that selected the validators.
        overrides_applied: Whether the override pass ran.

    Returns:
        Report: Immutable report for the run.
    """

    metadata = RunMetadata(
        files_analyzed=files_analyzed,
        confidence_threshold=confidence_threshold,
        validators=tuple(validators) if validators is not None else tuple(result.validator for result in results),
        profile=profile,
        overrides_applied=overrides_applied,
        tool_version=__version__,
    )
    return Report(metadata=metadata, results=tuple(results))


def report_payload(report: Report) -> dict[str, Any]:
    """Return the canonical JSON-compatible payload for ``report``.

    The payload carries every field of every violation, including suppressed
    ones, plus a summary block for readers; the summary is recomputed on load.
    """

    payload = report.model_dump(mode="json")
    payload["schema_version"] = REPORT_SCHEMA_VERSION
    payload["summary"] = {
        "passed": report.passed_count,
        "failed": report.failed_count,
        "violations": report.violation_count,
        "suppressed": report.suppressed_count,
        "filtered": report.filtered_count,
        "succeeded": report.succeeded,
    }
    return payload


def canonical_view(report: Report) -> Report:
    """Return ``report`` re-validated from its canonical payload.

    Human readable renderings are built from this view so they can never show
    information the JSON artifact does not carry.
    """

    return Report.model_validate(report_payload(report))


__all__ = ["REPORT_SCHEMA_VERSION", "build_report", "canonical_view", "report_payload"]
