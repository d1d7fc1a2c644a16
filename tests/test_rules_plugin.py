# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the built-in operator rules plugin."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from valence.models import JsonValue, ValidatorDefinition
from valence.plugins import Match, PluginContext
from valence.plugins.rules import evaluate_rules


def _context(root: Path, files: list[str], **document: Any) -> PluginContext:
    payload: dict[str, Any] = {"id": "check", "name": "Check"}
    payload.update(document)
    return PluginContext(validator=ValidatorDefinition.model_validate(payload), files=tuple(files), root=root)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "EventBus.ts").write_text("export class EventBus {}\n", encoding="utf-8")
    (tmp_path / "src" / "helpers.js").write_text("// helpers\nmodule.exports = {};\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    return tmp_path


def test_must_contain_is_case_insensitive(project: Path) -> None:
    context = _context(
        project,
        ["src/EventBus.ts"],
        type="content",
        rules=[{"operator": "mustContain", "value": "EXPORT CLASS"}],
    )

    assert evaluate_rules(context).passed is True


def test_matches_pattern_is_multiline(project: Path) -> None:
    context = _context(
        project,
        ["src/helpers.js"],
        type="content",
        rules=[{"id": "exports", "operator": "matchesPattern", "value": "^module\\.exports", "message": "no exports"}],
    )

    assert evaluate_rules(context).passed is True


def test_failed_content_rule_reports_file_and_rule(project: Path) -> None:
    context = _context(
        project,
        ["src/EventBus.ts", "src/helpers.js", "README.md"],
        type="content",
        filePattern=r"\.(ts|js)$",
        severity="warning",
        rules=[{"id": "license", "operator": "mustContain", "value": "SPDX", "confidence": 0.8}],
    )

    report = evaluate_rules(context)

    assert report.passed is False
    assert [violation.file_path for violation in report.violations] == ["src/EventBus.ts", "src/helpers.js"]
    assert {violation.severity.value for violation in report.violations} == {"warning"}
    assert {violation.confidence for violation in report.violations} == {0.8}
    assert report.violations[0].message == "Failed mustContain check"


def test_naming_rules_apply_to_basenames(project: Path) -> None:
    context = _context(
        project,
        ["src/EventBus.ts", "src/helpers.js"],
        type="naming",
        rules=[{"id": "pascal-case", "operator": "matchesPattern", "value": "^[A-Z][A-Za-z]+\\.ts$"}],
    )

    report = evaluate_rules(context)

    assert [violation.file_path for violation in report.violations] == ["src/helpers.js"]


def test_structure_rules_see_the_file_listing(project: Path) -> None:
    context = _context(
        project,
        ["src/EventBus.ts", "README.md"],
        type="structure",
        rules=[
            {"id": "has-readme", "operator": "matchesPattern", "value": "^README\\.md$"},
            {"id": "has-tests", "operator": "matchesPattern", "value": "^tests/"},
        ],
    )

    report = evaluate_rules(context)

    assert [violation.rule for violation in report.violations] == ["has-tests"]


def test_file_exists_and_has_extension(project: Path) -> None:
    exists = _context(project, [], type="structure", rules=[{"operator": "fileExists", "value": "README.md"}])
    missing = _context(project, [], type="structure", rules=[{"operator": "fileExists", "value": "LICENSE"}])
    extension = _context(
        project,
        ["src/EventBus.ts", "src/helpers.js"],
        type="naming",
        rules=[{"operator": "hasExtension", "value": [".ts"]}],
    )

    assert evaluate_rules(exists).passed is True
    assert evaluate_rules(missing).passed is False
    assert [violation.file_path for violation in evaluate_rules(extension).violations] == ["src/helpers.js"]


def test_unknown_operator_raises(project: Path) -> None:
    context = _context(project, ["README.md"], type="content", rules=[{"operator": "mustRhyme", "value": "x"}])

    with pytest.raises(ValueError, match="Unknown operator"):
        evaluate_rules(context)


def test_unreadable_file_becomes_violation(project: Path) -> None:
    context = _context(project, ["src/missing.ts"], type="content", rules=[{"operator": "mustContain", "value": "x"}])

    report = evaluate_rules(context)

    assert [violation.rule for violation in report.violations] == ["read-error"]


def test_stop_on_first_failure(project: Path) -> None:
    context = _context(
        project,
        ["README.md"],
        type="content",
        config={"stop_on_first_failure": True},
        rules=[
            {"id": "one", "operator": "mustContain", "value": "alpha"},
            {"id": "two", "operator": "mustContain", "value": "beta"},
        ],
    )

    assert [violation.rule for violation in evaluate_rules(context).violations] == ["one"]


def test_match_after_trailing_newline_reports_the_next_line(tmp_path: Path) -> None:
    (tmp_path / "module.py").write_text("x = 1\n", encoding="utf-8")
    context = _context(
        tmp_path,
        ["module.py"],
        type="content",
        rules=[{"id": "no-blank-lines", "operator": "mustNotMatch", "value": "^$"}],
    )

    report = evaluate_rules(context)

    [violation] = report.violations
    assert report.passed is False
    assert violation.line == 2
    assert violation.code is None


def test_structure_match_on_empty_listing_has_no_file(project: Path) -> None:
    context = _context(
        project,
        [],
        type="structure",
        rules=[{"id": "not-empty", "operator": "mustNotMatch", "value": "^$"}],
    )

    [violation] = evaluate_rules(context).violations

    assert violation.rule == "not-empty"
    assert violation.file_path is None


def test_context_operators_extend_the_builtin_table(project: Path) -> None:
    def _shorter_than(subject: str, value: JsonValue, context: PluginContext) -> Match | None:
        del context
        return Match() if isinstance(value, int) and len(subject) < value else None

    validator = ValidatorDefinition.model_validate(
        {
            "id": "short-names",
            "name": "Short names",
            "type": "naming",
            "rules": [{"id": "short", "operator": "shorterThan", "value": 11}],
        },
    )
    context = PluginContext(
        validator=validator,
        files=("src/EventBus.ts", "src/helpers.js"),
        root=project,
        operators={"shorterThan": _shorter_than},
    )

    assert [violation.file_path for violation in evaluate_rules(context).violations] == ["src/EventBus.ts"]
