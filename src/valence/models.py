# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the valence package."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Final

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from .paths import normalize_path_key
from .severity import Severity, coerce_severity

type JsonScalar = str | int | float | bool | None
type JsonValue = JsonScalar | list[JsonValue] | dict[str, JsonValue]

DEFAULT_CONFIDENCE: Final[float] = 1.0
FAILED_MESSAGE: Final[str] = "Some checks failed"
_CODE_HASH_LENGTH: Final[int] = 16
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")


def compute_code_hash(code: str | None) -> str | None:
    """Return a stable digest for a code excerpt, ignoring whitespace churn.

    Args:
        code: Code excerpt attached to a violation.

    Returns:
        str | None: Hex digest prefix, or ``None`` when no excerpt was supplied.
    """

    if code is None:
        return None
    collapsed = _WHITESPACE.sub(" ", code).strip()
    if not collapsed:
        return None
    return hashlib.sha256(collapsed.encode("utf-8")).hexdigest()[:_CODE_HASH_LENGTH]


class Suppression(BaseModel):
    """Record which override hid a violation, kept for the audit trail."""

    model_config = ConfigDict(frozen=True)

    key: str
    reason: str
    added_by: str | None = None
    created_at: datetime | None = None


class Violation(BaseModel):
    """Standardise findings returned by plugins into a common schema."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule: str
    file_path: str | None = Field(default=None, validation_alias=AliasChoices("file_path", "filePath", "file"))
    line: int | None = None
    message: str
    confidence: float = Field(default=DEFAULT_CONFIDENCE, ge=0.0, le=1.0)
    severity: Severity = Severity.ERROR
    code: str | None = None
    auto_fix_suggestion: str | None = Field(
        default=None,
        validation_alias=AliasChoices("auto_fix_suggestion", "autoFixSuggestion"),
    )
    impact: str | None = None
    suppression: Suppression | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_confidence(cls, value: object) -> object:
        """Treat an omitted confidence as certainty."""

        return DEFAULT_CONFIDENCE if value is None else value

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> Severity:
        """Accept the severity vocabularies plugins commonly use."""

        return coerce_severity(value if isinstance(value, (Severity, str)) else None)

    @field_validator("file_path", mode="before")
    @classmethod
    def _normalize_file(cls, value: str | Path | None) -> str | None:
        """Normalise reported file paths into POSIX keys."""

        if value is None:
            return None
        return normalize_path_key(value) or None

    @field_validator("line", mode="before")
    @classmethod
    def _coerce_line(cls, value: object) -> object:
        """Drop placeholder line numbers such as ``0`` or ``"unknown"``."""

        if value in (None, "", "unknown", "N/A", 0):
            return None
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def code_hash(self) -> str | None:
        """Return the stable hash of :attr:`code` used for override matching."""

        return compute_code_hash(self.code)


class RuleSpec(BaseModel):
    """Describe a single operator rule evaluated by the built-in rules plugin."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    operator: str
    value: JsonValue = None
    message: str | None = None
    severity: Severity | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @property
    def rule_name(self) -> str:
        """Return the identifier reported on violations raised by this rule."""

        return self.id or self.operator


class ValidatorType(str, Enum):
    """Enumerate how a validator applies its rules to the candidate files."""

    CONTENT = "content"
    STRUCTURE = "structure"
    NAMING = "naming"
    PLUGIN = "plugin"


class ValidatorDefinition(BaseModel):
    """Immutable, configured instance of a rule plugin."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    type: ValidatorType = ValidatorType.PLUGIN
    plugin: str = "rules"
    file_pattern: str | None = Field(default=None, validation_alias=AliasChoices("file_pattern", "filePattern"))
    severity: Severity = Severity.ERROR
    description: str = ""
    rules: tuple[RuleSpec, ...] = Field(default_factory=tuple)
    config: dict[str, JsonValue] = Field(default_factory=dict)
    source: Path | None = None

    @property
    def compiled_pattern(self) -> re.Pattern[str] | None:
        """Return the compiled :attr:`file_pattern` when one is configured."""

        if not self.file_pattern:
            return None
        return re.compile(self.file_pattern)


class Profile(BaseModel):
    """Named, ordered collection of validator ids run together."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    validators: tuple[str, ...]
    source: Path | None = None


def failure_violations(
    rule: str,
    *,
    details: Iterable[str] = (),
    message: str = "",
    severity: Severity = Severity.ERROR,
) -> tuple[Violation, ...]:
    """Return violations standing in for a failure reported without any.

    Each detail line becomes one violation; without details the message (or a
    generic failure message) is used.
    """

    sources = tuple(str(detail) for detail in details) or (message or FAILED_MESSAGE,)
    return tuple(Violation(rule=rule, message=text, severity=severity) for text in sources)


class ValidationResult(BaseModel):
    """Capture the outcome of one validator for one run.

    :attr:`passed` is always derived: a result passes when it carries no
    violations and the plugin did not fail. A caller that states
    ``passed=False`` without violations or an error gets violations
    synthesised from its details (or message) so the failure is kept;
    :meth:`with_violations` recomputes the flag after filtering.
    """

    model_config = ConfigDict(frozen=True)

    validator: str
    validator_name: str | None = None
    passed: bool = True
    message: str = ""
    violations: tuple[Violation, ...] = Field(default_factory=tuple)
    details: tuple[str, ...] = Field(default_factory=tuple)
    suppressed: tuple[Violation, ...] = Field(default_factory=tuple)
    filtered_count: int = 0
    error: str | None = None
    duration_ms: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def _derive_passed(cls, data: Any) -> Any:
        """Recompute ``passed`` from the supplied violations and error."""

        if isinstance(data, Mapping):
            payload = dict(data)
            if payload.get("passed") is False and not payload.get("violations") and payload.get("error") is None:
                payload["violations"] = failure_violations(
                    str(payload.get("validator", "")),
                    details=payload.get("details") or (),
                    message=str(payload.get("message") or ""),
                )
            payload["passed"] = not payload.get("violations") and payload.get("error") is None
            return payload
        return data

    @property
    def display_name(self) -> str:
        """Return the human readable validator name."""

        return self.validator_name or self.validator

    def with_violations(
        self,
        violations: Iterable[Violation],
        *,
        suppressed: Iterable[Violation] = (),
        filtered: int = 0,
    ) -> ValidationResult:
        """Return a copy carrying ``violations`` with ``passed`` recomputed.

        Args:
            violations: Violations that remain after a filtering pass.
            suppressed: Violations hidden by overrides during this pass.
            filtered: Number of violations dropped by the confidence filter.

        Returns:
            ValidationResult: New result honouring the ``passed`` invariant.
        """

        remaining = tuple(violations)
        return self.model_copy(
            update={
                "violations": remaining,
                "suppressed": self.suppressed + tuple(suppressed),
                "filtered_count": self.filtered_count + filtered,
                "passed": not remaining and self.error is None,
            },
        )


class RunMetadata(BaseModel):
    """Describe the run that produced a report."""

    model_config = ConfigDict(frozen=True)

    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    files_analyzed: int = 0
    confidence_threshold: float | None = None
    validators: tuple[str, ...] = Field(default_factory=tuple)
    profile: str | None = None
    overrides_applied: bool = False
    tool_version: str | None = None


class Report(BaseModel):
    """Aggregate the final results of a run together with its metadata."""

    model_config = ConfigDict(frozen=True)

    metadata: RunMetadata
    results: tuple[ValidationResult, ...]

    @property
    def passed_count(self) -> int:
        """Return how many validators passed."""

        return sum(1 for result in self.results if result.passed)

    @property
    def failed_count(self) -> int:
        """Return how many validators failed."""

        return len(self.results) - self.passed_count

    @property
    def violation_count(self) -> int:
        """Return the number of active violations across every validator."""

        return sum(len(result.violations) for result in self.results)

    @property
    def suppressed_count(self) -> int:
        """Return the number of violations hidden by overrides."""

        return sum(len(result.suppressed) for result in self.results)

    @property
    def filtered_count(self) -> int:
        """Return the number of violations dropped by the confidence filter."""

        return sum(result.filtered_count for result in self.results)

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when no validator reported an unsuppressed violation or failure."""

        return all(result.passed for result in self.results)

    def all_violations(self) -> list[Violation]:
        """Return every active violation in result order."""

        return [violation for result in self.results for violation in result.violations]

    def low_confidence_count(self, threshold: float) -> int:
        """Return how many active violations fall below ``threshold``."""

        return sum(1 for violation in self.all_violations() if violation.confidence < threshold)


__all__ = [
    "DEFAULT_CONFIDENCE",
    "FAILED_MESSAGE",
    "JsonScalar",
    "JsonValue",
    "Profile",
    "Report",
    "RuleSpec",
    "RunMetadata",
    "Suppression",
    "ValidationResult",
    "ValidatorDefinition",
    "ValidatorType",
    "Violation",
    "compute_code_hash",
    "failure_violations",
]
