# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the ``valence`` command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from valence.cli.app import app

runner = CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return a project with a small catalog and one TODO marker."""

    (tmp_path / "validators").mkdir()
    (tmp_path / "profiles").mkdir()
    (tmp_path / "src").mkdir()
    (tmp_path / "validators" / "no-todo.json").write_text(
        json.dumps(
            {
                "name": "No TODO",
                "type": "content",
                "filePattern": r"\.py$",
                "rules": [
                    {
                        "id": "no-todo",
                        "operator": "mustNotContain",
                        "value": "TODO",
                        "message": "Remove TODO markers",
                        "confidence": 0.9,
                    },
                ],
            },
        ),
        encoding="utf-8",
    )
    (tmp_path / "validators" / "has-readme.json").write_text(
        json.dumps(
            {
                "name": "Readme",
                "type": "structure",
                "rules": [{"operator": "matchesPattern", "value": r"^README\.md$"}],
            },
        ),
        encoding="utf-8",
    )
    (tmp_path / "profiles" / "hygiene.json").write_text(
        json.dumps({"validators": ["no-todo", "has-readme"]}),
        encoding="utf-8",
    )
    (tmp_path / "src" / "app.py").write_text("x = 1  # TODO tidy\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    return tmp_path


def _run(project: Path, *args: str) -> list[str]:
    return ["run", "--root", str(project), "--no-color", "--no-emoji", *args]


def test_run_profile_fails_on_violation(project: Path) -> None:
    result = runner.invoke(app, _run(project, "--profile", "hygiene"))

    assert result.exit_code == 1, result.stdout
    assert "No TODO" in result.stdout
    assert "Validation failed" in result.stdout


def test_run_passing_validator(project: Path) -> None:
    result = runner.invoke(app, _run(project, "--validator", "has-readme"))

    assert result.exit_code == 0, result.stdout
    assert "Validation passed" in result.stdout


def test_run_json_output(project: Path) -> None:
    args = _run(project, "--validators", "no-todo", "--validators", "has-readme", "--format", "json")
    result = runner.invoke(app, args)

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["summary"]["violations"] == 1
    assert payload["metadata"]["files_analyzed"] >= 2
    [violation] = payload["results"][0]["violations"]
    assert violation["file_path"] == "src/app.py"
    assert violation["line"] == 1


def test_confidence_threshold_option_filters(project: Path) -> None:
    result = runner.invoke(app, _run(project, "--validator", "no-todo", "--confidence-threshold", "0.95"))

    assert result.exit_code == 0, result.stdout


@pytest.mark.parametrize(
    "args",
    [
        ("--validator", "missing"),
        ("--profile", "missing"),
        (),
        ("--profile", "hygiene", "--validator", "no-todo"),
    ],
)
def test_run_setup_errors_exit_two(project: Path, args: tuple[str, ...]) -> None:
    result = runner.invoke(app, _run(project, *args))

    assert result.exit_code == 2


def test_run_invalid_config_exits_two(project: Path) -> None:
    (project / ".valence.toml").write_text("[execution]\nworkers = 2\n", encoding="utf-8")

    result = runner.invoke(app, _run(project, "--validator", "no-todo"))

    assert result.exit_code == 2


def test_dry_run_lists_validators(project: Path) -> None:
    result = runner.invoke(app, _run(project, "--profile", "hygiene", "--dry-run"))

    assert result.exit_code == 0, result.stdout
    assert "1. No TODO [no-todo]" in result.stdout
    assert "2. Readme [has-readme]" in result.stdout
    assert "Apply overrides: True" in result.stdout


def test_generate_reports(project: Path, tmp_path: Path) -> None:
    out = tmp_path / "reports"

    result = runner.invoke(
        app,
        _run(project, "--profile", "hygiene", "--generate-reports", "--report-dir", str(out)),
    )

    assert result.exit_code == 1, result.stdout
    assert sorted(path.name for path in out.iterdir()) == [
        "validation-report.html",
        "validation-report.json",
        "validation-report.md",
    ]


def test_override_lifecycle(project: Path) -> None:
    root = ["--root", str(project)]

    added = runner.invoke(
        app,
        ["overrides", "add", "--rule", "no-todo", "--file-path", "src/app.py", "--reason", "tracked", "--by", "dev"]
        + root,
    )
    assert added.exit_code == 0, added.stdout
    assert "no-todo|src/app.py|*|*" in added.stdout
    assert runner.invoke(app, _run(project, "--profile", "hygiene")).exit_code == 0

    listed = runner.invoke(app, ["overrides", "list", "--json", *root])
    [record] = json.loads(listed.stdout)
    assert record["rule"] == "no-todo"
    assert record["added_by"] == "dev"

    rejected = runner.invoke(app, ["overrides", "reject", "--rule", "no-todo", *root])
    assert "Marked 1 override(s) as rejected" in rejected.stdout
    assert runner.invoke(app, _run(project, "--profile", "hygiene")).exit_code == 1

    runner.invoke(app, ["overrides", "approve", "--file-path", "src/app.py", *root])
    stats = json.loads(runner.invoke(app, ["overrides", "stats", *root]).stdout)
    assert stats["total"] == 1
    assert stats["by_status"] == {"approved": 1}

    assert runner.invoke(app, ["overrides", "remove", "--rule", "no-todo", *root]).exit_code == 0
    assert runner.invoke(app, ["overrides", "remove", "--rule", "no-todo", *root]).exit_code == 1
    assert runner.invoke(app, ["overrides", "remove", *root]).exit_code == 2


def test_override_export_import(project: Path, tmp_path: Path) -> None:
    root = ["--root", str(project)]
    runner.invoke(app, ["overrides", "add", "--rule", "r", "--file-path", "a.py", "--reason", "x", *root])
    exported = tmp_path / "export.json"

    assert runner.invoke(app, ["overrides", "export", "-o", str(exported), *root]).exit_code == 0
    other = tmp_path / "other.json"
    result = runner.invoke(app, ["overrides", "import", str(exported), "--store", str(other), *root])

    assert result.exit_code == 0, result.stdout
    assert "Store now holds 1 override(s)" in result.stdout
    assert json.loads(other.read_text(encoding="utf-8"))["overrides"][0]["rule"] == "r"


def test_list_command(project: Path) -> None:
    result = runner.invoke(app, ["list", "--root", str(project)])

    assert result.exit_code == 0, result.stdout
    assert "no-todo" in result.stdout
    assert "  hygiene" in result.stdout
    assert "rules:" in result.stdout
