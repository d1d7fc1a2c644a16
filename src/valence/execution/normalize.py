# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Normalise the loosely typed values plugins return into validation results."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Final

from pydantic import ValidationError

from ..models import FAILED_MESSAGE, ValidationResult, ValidatorDefinition, Violation, failure_violations
from ..plugins import PluginOutput, PluginReport

PASSED_MESSAGE: Final[str] = "All checks passed"


class OutputNormalizationError(TypeError):
    """Raised when a plugin returns a value that cannot be interpreted."""


def normalize_output(validator: ValidatorDefinition, output: PluginOutput) -> ValidationResult:
    """Convert ``output`` into a :class:`ValidationResult` for ``validator``.

    Args:
        validator: Definition whose plugin produced ``output``.
        output: Value returned (or awaited) from the plugin.

    Returns:
        ValidationResult: Result whose ``passed`` flag agrees with its violations.

    Raises:
        OutputNormalizationError: If ``output`` has an unsupported shape.
    """

    if isinstance(output, ValidationResult):
        return output.model_copy(update={"validator": validator.id, "validator_name": validator.name})
    if output is None:
        return _result(validator, passed=True, message=PASSED_MESSAGE)
    if isinstance(output, PluginReport):
        return _from_report(validator, output)
    if isinstance(output, Mapping):
        try:
            report = PluginReport.model_validate(dict(output))
        except ValidationError as exc:
            raise OutputNormalizationError(f"plugin returned an invalid report mapping: {exc}") from exc
        return _from_report(validator, report)
    if isinstance(output, (str, bytes)) or not isinstance(output, Iterable):
        raise OutputNormalizationError(f"unsupported plugin output of type {type(output).__name__}")
    violations = tuple(_coerce_violation(item) for item in output)
    return _result(
        validator,
        passed=not violations,
        message=FAILED_MESSAGE if violations else PASSED_MESSAGE,
        violations=violations,
    )


def _from_report(validator: ValidatorDefinition, report: PluginReport) -> ValidationResult:
    violations = report.violations
    if report.passed is False and not violations:
        violations = failure_violations(
            validator.id,
            details=report.details,
            message=report.message,
            severity=validator.severity,
        )
    passed = not violations
    message = report.message or (PASSED_MESSAGE if passed else FAILED_MESSAGE)
    return _result(validator, passed=passed, message=message, violations=violations, details=report.details)


def _coerce_violation(item: Any) -> Violation:
    if isinstance(item, Violation):
        return item
    if isinstance(item, Mapping):
        try:
            return Violation.model_validate(dict(item))
        except ValidationError as exc:
            raise OutputNormalizationError(f"plugin returned an invalid violation: {exc}") from exc
    raise OutputNormalizationError(f"unsupported violation entry of type {type(item).__name__}")


def _result(
    validator: ValidatorDefinition,
    *,
    passed: bool,
    message: str,
    violations: tuple[Violation, ...] = (),
    details: tuple[str, ...] = (),
) -> ValidationResult:
    return ValidationResult(
        validator=validator.id,
        validator_name=validator.name,
        passed=passed,
        message=message,
        violations=violations,
        details=details,
    )


__all__ = ["FAILED_MESSAGE", "PASSED_MESSAGE", "OutputNormalizationError", "normalize_output"]
