# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from valence.models import ValidationResult, Violation
from valence.plugins import PluginContext, PluginRegistry, PluginReport, default_registry

WriteDocument = Callable[[str, dict[str, Any]], Path]


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    """Return an empty catalog directory with ``validators`` and ``profiles``."""

    root = tmp_path / "catalog"
    (root / "validators").mkdir(parents=True)
    (root / "profiles").mkdir()
    return root


@pytest.fixture
def write_validator(catalog_root: Path) -> WriteDocument:
    """Return a helper writing ``validators/<id>.json``."""

    def _write(validator_id: str, document: dict[str, Any]) -> Path:
        path = catalog_root / "validators" / f"{validator_id}.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_profile(catalog_root: Path) -> WriteDocument:
    """Return a helper writing ``profiles/<name>.json``."""

    def _write(name: str, document: dict[str, Any]) -> Path:
        path = catalog_root / "profiles" / f"{name}.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def registry() -> PluginRegistry:
    """Return the built-in registry extended with deterministic test plugins."""

    reg = default_registry(include_entry_points=False)

    @reg.plugin("fixed", description="Report the violations listed in config.")
    def _fixed(context: PluginContext) -> PluginReport:
        raw = context.config.get("violations", [])
        violations = tuple(Violation.model_validate(item) for item in raw if isinstance(item, dict))
        return PluginReport(passed=not violations, message="fixed", violations=violations)

    @reg.plugin("explode")
    def _explode(context: PluginContext) -> ValidationResult:
        """Always raise."""

        raise RuntimeError(f"boom in {context.validator.id}")

    return reg


@pytest.fixture
def make_violation() -> Callable[..., Violation]:
    """Return a factory for violations with sensible defaults."""

    def _make(**overrides: Any) -> Violation:
        payload: dict[str, Any] = {"rule": "no-eval", "file_path": "src/a.js", "message": "eval is forbidden"}
        payload.update(overrides)
        return Violation.model_validate(payload)

    return _make
