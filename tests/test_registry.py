# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pytest

from valence.plugins import (
    OPERATOR_ENTRY_POINT_GROUP,
    RULES_PLUGIN_ID,
    Match,
    PluginContext,
    PluginRegistry,
    ValidatorPlugin,
    default_registry,
    discover_entry_point_operators,
    discover_entry_point_plugins,
)
from valence.plugins import registry as registry_module


def _noop(context: PluginContext) -> None:
    del context


@dataclass
class _FakeEntryPoint:
    name: str
    target: Any

    def load(self) -> Any:
        if isinstance(self.target, Exception):
            raise self.target
        return self.target


def test_register_rejects_duplicates() -> None:
    registry = PluginRegistry([ValidatorPlugin(plugin_id="a", evaluate=_noop)])

    with pytest.raises(ValueError, match="already registered"):
        registry.register(ValidatorPlugin(plugin_id="a", evaluate=_noop))


def test_decorator_registers_with_docstring_description() -> None:
    registry = PluginRegistry()

    @registry.plugin("shout")
    def _shout(context: PluginContext) -> None:
        """Shout about things.

        More detail here.
        """

    assert registry["shout"].description == "Shout about things."
    assert registry.try_get("missing") is None


def test_iteration_is_sorted() -> None:
    registry = PluginRegistry(ValidatorPlugin(plugin_id=name, evaluate=_noop) for name in ("zeta", "alpha", "mid"))

    assert list(registry) == ["alpha", "mid", "zeta"]
    assert [plugin.plugin_id for plugin in registry.plugins()] == ["alpha", "mid", "zeta"]
    assert len(registry) == 3


def test_default_registry_contains_rules_plugin() -> None:
    assert RULES_PLUGIN_ID in default_registry(include_entry_points=False)


def test_entry_point_failures_are_logged(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    good = ValidatorPlugin(plugin_id="third-party", evaluate=_noop)
    entries = [
        _FakeEntryPoint("good", lambda: [good]),
        _FakeEntryPoint("broken", ImportError("no module named nope")),
        _FakeEntryPoint("wrong", object()),
    ]
    monkeypatch.setattr(registry_module.metadata, "entry_points", lambda group: entries)

    with caplog.at_level(logging.WARNING):
        plugins = discover_entry_point_plugins()

    assert plugins == (good,)
    assert "broken" in caplog.text
    assert "wrong" in caplog.text


def test_entry_point_cannot_shadow_builtin(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    shadow = ValidatorPlugin(plugin_id=RULES_PLUGIN_ID, evaluate=_noop)
    monkeypatch.setattr(
        registry_module.metadata,
        "entry_points",
        lambda group: [_FakeEntryPoint("shadow", shadow)],
    )

    with caplog.at_level(logging.WARNING):
        registry = default_registry()

    assert registry[RULES_PLUGIN_ID] is not shadow
    assert "duplicate plugin id" in caplog.text


def _always(subject: str, value: object, context: PluginContext) -> Match | None:
    del subject, value, context
    return Match()


def test_register_operator_rejects_builtin_and_duplicate_names() -> None:
    registry = PluginRegistry()
    registry.register_operator("always", _always)

    with pytest.raises(ValueError, match="already registered"):
        registry.register_operator("mustContain", _always)
    with pytest.raises(ValueError, match="already registered"):
        registry.register_operator("always", _always)
    assert dict(registry.operators) == {"always": _always}


def test_operator_entry_points_are_discovered(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    groups: list[str] = []
    entries = [
        _FakeEntryPoint("always", _always),
        _FakeEntryPoint("broken", ImportError("no module named nope")),
        _FakeEntryPoint("constant", 3),
    ]

    def _entry_points(group: str) -> list[_FakeEntryPoint]:
        groups.append(group)
        return entries if group == OPERATOR_ENTRY_POINT_GROUP else []

    monkeypatch.setattr(registry_module.metadata, "entry_points", _entry_points)

    with caplog.at_level(logging.WARNING):
        discovered = discover_entry_point_operators()
        registry = default_registry()

    assert discovered == (("always", _always),)
    assert registry.operators["always"] is _always
    assert OPERATOR_ENTRY_POINT_GROUP in groups
    assert "Failed to load operator entry point broken" in caplog.text
    assert "constant did not provide a callable" in caplog.text


def test_operator_entry_point_cannot_shadow_builtin(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setattr(
        registry_module.metadata,
        "entry_points",
        lambda group: [_FakeEntryPoint("mustContain", _always)] if group == OPERATOR_ENTRY_POINT_GROUP else [],
    )

    with caplog.at_level(logging.WARNING):
        registry = default_registry()

    assert "mustContain" not in registry.operators
    assert "Ignoring duplicate operator 'mustContain'" in caplog.text
