# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Confidence threshold filtering of validation results."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final, Literal

from .models import ValidationResult

ConfidenceBand = Literal["high", "medium", "low"]

HIGH_CONFIDENCE: Final[float] = 0.9
MEDIUM_CONFIDENCE: Final[float] = 0.7


def filter_by_threshold(
    results: Sequence[ValidationResult],
    threshold: float | None,
) -> list[ValidationResult]:
    """Drop violations whose confidence is strictly below ``threshold``.

    Args:
        results: Results to filter.
        threshold: Minimum confidence to keep, or ``None`` to disable filtering.

    Returns:
        list[ValidationResult]: Filtered results with ``passed`` recomputed. With
        ``threshold=None`` the input result objects are returned unchanged.

    Raises:
        ValueError: If ``threshold`` lies outside ``[0, 1]``.
    """

    if threshold is None:
        return list(results)
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"confidence threshold must be between 0 and 1, got {threshold}")

    filtered: list[ValidationResult] = []
    for result in results:
        kept = [violation for violation in result.violations if violation.confidence >= threshold]
        dropped = len(result.violations) - len(kept)
        filtered.append(result.with_violations(kept, filtered=dropped) if dropped else result)
    return filtered


def confidence_band(confidence: float) -> ConfidenceBand:
    """Classify ``confidence`` for reporting."""

    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


__all__ = ["HIGH_CONFIDENCE", "MEDIUM_CONFIDENCE", "ConfidenceBand", "confidence_band", "filter_by_threshold"]
