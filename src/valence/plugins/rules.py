# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Built-in operator based plugin for ``content``, ``structure`` and ``naming`` validators."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import PurePosixPath
from typing import Final

from ..models import JsonValue, RuleSpec, ValidatorType, Violation
from .base import Match, Operator, PluginContext, PluginReport, ValidatorPlugin

RULES_PLUGIN_ID: Final[str] = "rules"
READ_ERROR_RULE: Final[str] = "read-error"

RULES_CONFIG_SCHEMA: Final[dict[str, object]] = {
    "type": "object",
    "properties": {
        "stop_on_first_failure": {"type": "boolean"},
    },
    "additionalProperties": False,
}


def _pattern(value: JsonValue, flags: int = 0) -> re.Pattern[str]:
    if not isinstance(value, str):
        raise ValueError(f"operator value must be a regular expression string, got {value!r}")
    return re.compile(value, flags)


def _line_at(lines: Sequence[str], line: int | None) -> str | None:
    if line is None or not 0 < line <= len(lines):
        return None
    return lines[line - 1]


def _locate(subject: str, match: re.Match[str]) -> Match:
    # The sentinel keeps a match that starts right after a line break on the next line.
    line = len(f"{subject[: match.start()]}_".splitlines())
    excerpt = (_line_at(subject.splitlines(), line) or "").strip()
    return Match(line=line, excerpt=excerpt or None)


def _must_contain(subject: str, value: JsonValue, context: PluginContext) -> Match | None:
    del context
    found = _pattern(value, re.IGNORECASE).search(subject)
    return _locate(subject, found) if found else None


def _matches_pattern(subject: str, value: JsonValue, context: PluginContext) -> Match | None:
    del context
    found = _pattern(value, re.MULTILINE).search(subject)
    return _locate(subject, found) if found else None


def _file_exists(subject: str, value: JsonValue, context: PluginContext) -> Match | None:
    del subject
    if not isinstance(value, str):
        raise ValueError(f"fileExists expects a path string, got {value!r}")
    return Match() if context.resolve(value).exists() else None


def _has_extension(subject: str, value: JsonValue, context: PluginContext) -> Match | None:
    del context
    extensions = [value] if isinstance(value, str) else value
    if not isinstance(extensions, list):
        raise ValueError(f"hasExtension expects a list of extensions, got {value!r}")
    suffix = PurePosixPath(subject).suffix.lower()
    return Match() if suffix in {str(ext).lower() for ext in extensions} else None


OPERATORS: Final[dict[str, Operator]] = {
    "mustContain": _must_contain,
    "matchesPattern": _matches_pattern,
    "fileExists": _file_exists,
    "hasExtension": _has_extension,
}

# Operators whose match is the violation rather than the requirement.
NEGATED_OPERATORS: Final[dict[str, str]] = {
    "mustNotContain": "mustContain",
    "mustNotMatch": "matchesPattern",
}

BUILTIN_OPERATOR_NAMES: Final[frozenset[str]] = frozenset(OPERATORS) | frozenset(NEGATED_OPERATORS)


def _evaluate_rule(rule: RuleSpec, subject: str, context: PluginContext) -> tuple[bool, Match | None]:
    """Return ``(passed, location)`` for ``rule`` applied to ``subject``.

    Built-in operators are looked up first, then the operators registered on
    the plugin registry and handed over through ``context``.

    Raises:
        ValueError: If the rule references an unknown operator.
    """

    negated = NEGATED_OPERATORS.get(rule.operator)
    name = negated or rule.operator
    operator = OPERATORS.get(name) or context.operators.get(name)
    if operator is None:
        raise ValueError(f"Unknown operator: {rule.operator}")
    match = operator(subject, rule.value, context)
    if negated:
        return match is None, match
    return match is not None, None


def _violation(
    rule: RuleSpec,
    context: PluginContext,
    *,
    file_path: str | None,
    location: Match | None,
) -> Violation:
    return Violation(
        rule=rule.rule_name,
        file_path=file_path,
        line=location.line if location else None,
        message=rule.message or f"Failed {rule.operator} check",
        confidence=rule.confidence,
        severity=rule.severity or context.validator.severity,
        code=location.excerpt if location else None,
    )


def _check_subject(
    rules: Sequence[RuleSpec],
    subject: str,
    context: PluginContext,
    *,
    file_path: str | None,
    stop_on_first_failure: bool,
) -> list[Violation]:
    violations: list[Violation] = []
    for rule in rules:
        passed, location = _evaluate_rule(rule, subject, context)
        if passed:
            continue
        violations.append(_violation(rule, context, file_path=file_path, location=location))
        if stop_on_first_failure:
            break
    return violations


def evaluate_rules(context: PluginContext) -> PluginReport:
    """Apply the validator's operator rules to its target files."""

    validator = context.validator
    rules = validator.rules
    stop_on_first_failure = bool(context.config.get("stop_on_first_failure", False))
    targets = context.target_files()
    violations: list[Violation] = []

    if validator.type is ValidatorType.STRUCTURE:
        listing = "\n".join(targets)
        for rule in rules:
            passed, location = _evaluate_rule(rule, listing, context)
            if not passed:
                offending = _line_at(listing.splitlines(), location.line if location else None)
                violations.append(
                    _violation(rule, context, file_path=offending, location=Match() if offending else location),
                )
                if stop_on_first_failure:
                    break
    elif validator.type is ValidatorType.NAMING:
        for path in targets:
            violations.extend(
                _check_subject(
                    rules,
                    PurePosixPath(path).name,
                    context,
                    file_path=path,
                    stop_on_first_failure=stop_on_first_failure,
                ),
            )
    else:
        for path in targets:
            try:
                content = context.read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                violations.append(
                    Violation(
                        rule=READ_ERROR_RULE,
                        file_path=path,
                        message=f"Error reading file: {exc}",
                        severity=validator.severity,
                    ),
                )
                continue
            violations.extend(
                _check_subject(
                    rules,
                    content,
                    context,
                    file_path=path,
                    stop_on_first_failure=stop_on_first_failure,
                ),
            )

    if violations:
        return PluginReport(passed=False, message="Some checks failed", violations=tuple(violations))
    return PluginReport(passed=True, message=f"All checks passed ({len(targets)} file(s))")


RULES_PLUGIN: Final[ValidatorPlugin] = ValidatorPlugin(
    plugin_id=RULES_PLUGIN_ID,
    evaluate=evaluate_rules,
    description="Operator rules (mustContain, matchesPattern, fileExists, hasExtension) applied per validator type.",
    config_schema=RULES_CONFIG_SCHEMA,
)


__all__ = [
    "BUILTIN_OPERATOR_NAMES",
    "NEGATED_OPERATORS",
    "OPERATORS",
    "RULES_PLUGIN",
    "RULES_PLUGIN_ID",
    "evaluate_rules",
]
