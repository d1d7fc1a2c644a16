# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for the validation pipeline."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from valence.catalog import ValidatorLoader
from valence.execution import run_validators
from valence.filtering import filter_by_threshold
from valence.overrides import Override, OverrideStatus, OverrideStore
from valence.pipeline import RunRequest, ValidationPipeline
from valence.plugins import PluginRegistry

WriteDocument = Callable[[str, dict[str, Any]], Path]
FILES = tuple(f"src/file{index}.js" for index in range(9)) + ("src/a.js",)


@pytest.fixture
def security_catalog(write_validator: WriteDocument, write_profile: WriteDocument) -> None:
    write_validator(
        "no-eval",
        {
            "name": "No eval",
            "plugin": "fixed",
            "config": {
                "violations": [
                    {"rule": "no-eval", "filePath": "src/a.js", "line": 3, "message": "eval", "confidence": 0.95},
                    {"rule": "no-eval", "filePath": "src/file1.js", "message": "maybe eval", "confidence": 0.4},
                ],
            },
        },
    )
    write_validator("secrets-scan", {"name": "Secrets scan", "plugin": "fixed"})
    write_profile("security", {"validators": ["no-eval", "secrets-scan"]})


def _pipeline(catalog_root: Path, registry: PluginRegistry, store: OverrideStore | None) -> ValidationPipeline:
    loader = ValidatorLoader(catalog_root=catalog_root, registry=registry)
    return ValidationPipeline(loader=loader, registry=registry, override_store=store, jobs=2)


@pytest.mark.usefixtures("security_catalog")
def test_security_profile_with_threshold(catalog_root: Path, registry: PluginRegistry) -> None:
    pipeline = _pipeline(catalog_root, registry, None)

    report = pipeline.execute(RunRequest(files=FILES, profile="security", confidence_threshold=0.7))

    assert report.violation_count == 1
    assert report.failed_count == 1
    assert report.passed_count == 1
    assert report.metadata.files_analyzed == 10
    assert report.metadata.validators == ("no-eval", "secrets-scan")
    assert report.results[0].filtered_count == 1


@pytest.mark.usefixtures("security_catalog")
def test_approved_override_flips_result(catalog_root: Path, registry: PluginRegistry, tmp_path: Path) -> None:
    store = OverrideStore(tmp_path / ".valence-overrides.json")
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="sandboxed", status=OverrideStatus.APPROVED))
    pipeline = _pipeline(catalog_root, registry, store)

    report = pipeline.execute(RunRequest(files=FILES, profile="security", confidence_threshold=0.7))
    unsuppressed = pipeline.execute(
        RunRequest(files=FILES, profile="security", confidence_threshold=0.7, apply_overrides=False),
    )

    assert report.violation_count == 0
    assert report.results[0].passed is True
    assert report.suppressed_count == 1
    assert report.succeeded is True
    assert report.metadata.overrides_applied is True
    assert unsuppressed.violation_count == 1


@pytest.mark.usefixtures("security_catalog")
def test_override_and_threshold_order_does_not_matter(
    catalog_root: Path,
    registry: PluginRegistry,
    tmp_path: Path,
) -> None:
    store = OverrideStore(tmp_path / "o.json")
    store.add_override(Override(rule="no-eval", file_path="src/file1.js", reason="r"))
    pipeline = _pipeline(catalog_root, registry, store)
    definitions = pipeline.resolve(RunRequest(files=FILES, profile="security"))

    raw = run_validators(definitions, FILES, registry=registry)
    first = filter_by_threshold(store.apply_overrides(raw), 0.7)
    second = store.apply_overrides(filter_by_threshold(raw, 0.7))

    assert [len(result.violations) for result in first] == [len(result.violations) for result in second]


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"profile": "security", "validator": "no-eval"}, {"validators": ("a",), "profile": "p"}],
)
def test_run_request_requires_exactly_one_source(kwargs: dict[str, Any]) -> None:
    with pytest.raises(ValueError):
        RunRequest(files=(), **kwargs)


def test_run_request_rejects_bad_threshold() -> None:
    with pytest.raises(ValueError):
        RunRequest(files=(), validator="x", confidence_threshold=1.5)


def test_single_validator_request(
    catalog_root: Path,
    registry: PluginRegistry,
    write_validator: WriteDocument,
) -> None:
    write_validator("broken", {"name": "Broken", "plugin": "explode"})
    pipeline = _pipeline(catalog_root, registry, None)

    report = pipeline.execute(RunRequest(files=("a.js",), validator="broken"))

    [result] = report.results
    assert result.passed is False
    assert result.error is not None
    assert json.loads(report.model_dump_json())["results"][0]["error"] == result.error
