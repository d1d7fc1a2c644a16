# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the persisted override store."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from valence.config import MatchStrictness
from valence.errors import OverrideStoreError
from valence.models import ValidationResult, Violation
from valence.overrides import Override, OverrideStatus, OverrideStore

MakeViolation = Callable[..., Violation]


def test_missing_file_yields_empty_store(tmp_path: Path) -> None:
    store = OverrideStore(tmp_path / "absent.json")

    assert store.list_overrides() == []
    assert not (tmp_path / "absent.json").exists()


def test_corrupt_file_falls_back_to_empty_store(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "overrides.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="valence.overrides.store"):
        store = OverrideStore(path)

    assert len(store) == 0
    assert "Ignoring override file" in caplog.text


def test_approved_override_matches_rule_and_file(tmp_path: Path, make_violation: MakeViolation) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    store.add_override({"rule": "no-eval", "filePath": "./src/a.js", "reason": "sandboxed", "status": "approved"})

    assert store.is_overridden(make_violation())
    assert store.is_overridden(make_violation(file_path=None), "src/a.js")
    assert not store.is_overridden(make_violation(file_path="src/b.js"))
    assert not store.is_overridden(make_violation(rule="no-with"))


@pytest.mark.parametrize("status", [OverrideStatus.PENDING, OverrideStatus.REJECTED])
def test_only_approved_overrides_suppress(
    tmp_path: Path,
    make_violation: MakeViolation,
    status: OverrideStatus,
) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r"))
    assert store.is_overridden(make_violation())

    changed = store.set_status({"rule": "no-eval"}, status)

    assert changed == 1
    assert not store.is_overridden(make_violation())


def test_code_hash_pins_override_to_its_excerpt(tmp_path: Path, make_violation: MakeViolation) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    original = make_violation(code="eval(userInput)")
    store.add_override_for(original, "reviewed")

    assert store.is_overridden(make_violation(code="eval(  userInput )"))
    assert not store.is_overridden(make_violation(code="eval(otherInput)"))


def test_line_strictness(tmp_path: Path, make_violation: MakeViolation) -> None:
    path = tmp_path / "overrides.json"
    store = OverrideStore(path, match_on=MatchStrictness.LINE)
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r", line=3))

    assert store.is_overridden(make_violation(line=3))
    assert not store.is_overridden(make_violation(line=4))
    assert OverrideStore(path).is_overridden(make_violation(line=4))


def test_mutations_persist_and_reload(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "overrides.json"
    store = OverrideStore(path)
    stored = store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r", added_by="dev"))

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["version"] == "1.0"
    assert "last_updated" in document
    assert [entry["rule"] for entry in document["overrides"]] == ["no-eval"]
    assert list(path.parent.glob("*.tmp")) == []

    reloaded = OverrideStore(path)
    assert [item.key for item in reloaded.list_overrides()] == [stored.key]

    assert reloaded.remove_override(stored.key) == 1
    assert OverrideStore(path).list_overrides() == []


def test_add_replaces_existing_key(tmp_path: Path) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="first"))
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="second"))

    assert [item.reason for item in store.list_overrides()] == ["second"]


def test_remove_by_criteria_requires_all_fields(tmp_path: Path) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r"))
    store.add_override(Override(rule="no-eval", file_path="src/b.js", reason="r"))
    store.add_override(Override(rule="no-with", file_path="src/a.js", reason="r"))

    assert store.remove_override({"rule": "no-eval", "file_path": "src/a.js"}) == 1
    assert store.remove_override({"rule": "missing"}) == 0
    with pytest.raises(ValueError):
        store.remove_override({})
    assert len(store) == 2


def test_write_failure_raises_and_keeps_state(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = OverrideStore(blocker / "overrides.json")

    with pytest.raises(OverrideStoreError):
        store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r"))

    assert store.list_overrides() == []


def test_statistics(tmp_path: Path) -> None:
    now = datetime(2025, 6, 15, tzinfo=UTC)
    store = OverrideStore(tmp_path / "overrides.json")
    store.add_override(Override(rule="no-eval", file_path="a.js", reason="r", created_at=now - timedelta(days=1)))
    store.add_override(
        Override(rule="no-eval", file_path="b.js", reason="r", created_at=now - timedelta(days=30), added_by="ana"),
    )
    store.add_override(
        Override(rule="naming", file_path="c.js", reason="r", created_at=now - timedelta(days=6), status="pending"),
    )

    stats = store.get_override_statistics(now=now)

    assert stats.total == 3
    assert stats.recent == 2
    assert stats.by_rule == {"no-eval": 2, "naming": 1}
    assert stats.by_status == {"approved": 2, "pending": 1}
    assert stats.by_user["ana"] == 1


def test_apply_overrides_is_idempotent(tmp_path: Path, make_violation: MakeViolation) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r"))
    kept = make_violation(file_path="src/b.js")
    results = [ValidationResult(validator="no-eval", violations=(make_violation(), kept))]

    once = store.apply_overrides(results)
    twice = store.apply_overrides(once)

    assert once == twice
    assert once[0].violations == (kept,)
    assert len(once[0].suppressed) == 1
    assert once[0].passed is False


def test_legacy_keyed_format_is_accepted(tmp_path: Path, make_violation: MakeViolation) -> None:
    path = tmp_path / "overrides.json"
    path.write_text(
        json.dumps(
            {
                "version": "1.0",
                "lastUpdated": "2025-01-01T00:00:00Z",
                "overrides": {
                    "abc": {
                        "violationKey": "abc",
                        "rule": "no-eval",
                        "filePath": "src/a.js",
                        "status": "false_positive",
                        "reason": "legacy",
                        "addedBy": "dev",
                        "addedAt": "2025-01-01T00:00:00Z",
                    },
                },
            },
        ),
        encoding="utf-8",
    )

    store = OverrideStore(path)

    assert store.is_overridden(make_violation())


def test_export_and_import(tmp_path: Path) -> None:
    source = OverrideStore(tmp_path / "a.json")
    source.add_override(Override(rule="no-eval", file_path="src/a.js", reason="r"))
    target = OverrideStore(tmp_path / "b.json")
    target.add_override(Override(rule="naming", file_path="src/b.js", reason="r"))

    assert target.import_overrides(source.export_overrides()) == 2
    assert target.import_overrides(source.export_overrides(), merge=False) == 1
    assert [item.rule for item in OverrideStore(tmp_path / "b.json").list_overrides()] == ["no-eval"]


def test_suppressed_violations_keep_the_override_audit_trail(tmp_path: Path, make_violation: MakeViolation) -> None:
    store = OverrideStore(tmp_path / "overrides.json")
    stored = store.add_override(Override(rule="no-eval", file_path="src/a.js", reason="sandboxed", added_by="ana"))

    [result] = store.apply_overrides([ValidationResult(validator="no-eval", violations=(make_violation(),))])

    [suppressed] = result.suppressed
    assert suppressed.suppression is not None
    assert suppressed.suppression.key == stored.key
    assert suppressed.suppression.reason == "sandboxed"
    assert suppressed.suppression.added_by == "ana"
    assert suppressed.suppression.created_at == stored.created_at
    assert result.passed is True


def test_concurrent_mutations_and_reads_stay_consistent(tmp_path: Path, make_violation: MakeViolation) -> None:
    path = tmp_path / "overrides.json"
    store = OverrideStore(path)

    def _work(index: int) -> None:
        file_path = f"src/module_{index}.js"
        violation = make_violation(file_path=file_path)
        stored = store.add_override(Override(rule="no-eval", file_path=file_path, reason=f"reviewed {index}"))
        assert store.is_overridden(violation)
        [result] = store.apply_overrides([ValidationResult(validator="no-eval", violations=(violation,))])
        assert result.violations == ()
        if index % 2:
            assert store.remove_override(stored.key) == 1
            assert not store.is_overridden(violation)

    with ThreadPoolExecutor(max_workers=8) as executor:
        futures = [executor.submit(_work, index) for index in range(40)]
        for future in futures:
            future.result()

    in_memory = {item.key for item in store.list_overrides()}
    assert len(in_memory) == 20
    assert {item.key for item in OverrideStore(path).list_overrides()} == in_memory
    assert list(tmp_path.glob("*.tmp")) == []
