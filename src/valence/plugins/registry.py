# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plugin registry mapping stable ids to validator plugins."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from importlib import metadata
from importlib.metadata import EntryPoint
from typing import Any, Final

from types import MappingProxyType

from .base import Evaluator, Operator, ValidatorPlugin
from .rules import BUILTIN_OPERATOR_NAMES, RULES_PLUGIN

LOGGER = logging.getLogger(__name__)

PLUGIN_ENTRY_POINT_GROUP: Final[str] = "valence.plugins"
OPERATOR_ENTRY_POINT_GROUP: Final[str] = "valence.operators"


class PluginRegistry(Mapping[str, ValidatorPlugin]):
    """Central registry for validator plugins.

    ``PluginRegistry`` behaves like a read-only mapping whose keys are plugin
    ids and whose values are :class:`ValidatorPlugin` instances. Registration
    happens once at process start; lookups during a run never import code.
    """

    def __init__(self, plugins: Iterable[ValidatorPlugin] = ()) -> None:
        """Initialise the registry, registering any ``plugins`` supplied."""

        self._plugins: dict[str, ValidatorPlugin] = {}
        self._operators: dict[str, Operator] = {}
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: ValidatorPlugin) -> ValidatorPlugin:
        """Register ``plugin`` enforcing uniqueness by id.

        Args:
            plugin: Plugin to insert into the registry.

        Returns:
            ValidatorPlugin: The registered plugin.

        Raises:
            ValueError: If a plugin with the same id is already registered.
        """

        if plugin.plugin_id in self._plugins:
            raise ValueError(f"Plugin '{plugin.plugin_id}' already registered")
        self._plugins[plugin.plugin_id] = plugin
        return plugin

    def plugin(
        self,
        plugin_id: str,
        *,
        description: str = "",
        config_schema: Mapping[str, Any] | None = None,
    ) -> Callable[[Evaluator], Evaluator]:
        """Return a decorator registering the decorated evaluator under ``plugin_id``."""

        def decorator(func: Evaluator) -> Evaluator:
            self.register(
                ValidatorPlugin(
                    plugin_id=plugin_id,
                    evaluate=func,
                    description=description or _first_doc_line(func),
                    config_schema=config_schema,
                ),
            )
            return func

        return decorator

    def register_operator(self, name: str, operator: Operator) -> Operator:
        """Register an extra rule operator usable by ``rules`` validators.

        Raises:
            ValueError: If ``name`` is a built-in operator or already registered.
        """

        if name in BUILTIN_OPERATOR_NAMES or name in self._operators:
            raise ValueError(f"Operator '{name}' already registered")
        self._operators[name] = operator
        return operator

    def operator(self, name: str) -> Callable[[Operator], Operator]:
        """Return a decorator registering the decorated function as operator ``name``."""

        def decorator(func: Operator) -> Operator:
            return self.register_operator(name, func)

        return decorator

    @property
    def operators(self) -> Mapping[str, Operator]:
        """Return a read-only view of the registered extra operators."""

        return MappingProxyType(self._operators)

    def try_get(self, plugin_id: str) -> ValidatorPlugin | None:
        """Return the plugin registered under ``plugin_id`` or ``None``."""

        return self._plugins.get(plugin_id)

    def plugins(self) -> tuple[ValidatorPlugin, ...]:
        """Return registered plugins sorted by id."""

        return tuple(self._plugins[key] for key in sorted(self._plugins))

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._plugins))

    def __getitem__(self, plugin_id: str) -> ValidatorPlugin:
        return self._plugins[plugin_id]


def _first_doc_line(func: Callable[..., object]) -> str:
    lines = (func.__doc__ or "").strip().splitlines()
    return lines[0] if lines else ""


def _coerce_entry_point(entry: EntryPoint) -> tuple[ValidatorPlugin, ...]:
    """Return the plugins exposed by ``entry``.

    Entry points may reference a :class:`ValidatorPlugin`, an iterable of
    them, or a zero-argument factory returning either.
    """

    loaded = entry.load()
    if callable(loaded) and not isinstance(loaded, ValidatorPlugin):
        loaded = loaded()
    if isinstance(loaded, ValidatorPlugin):
        return (loaded,)
    if isinstance(loaded, Iterable):
        plugins = tuple(loaded)
        if all(isinstance(item, ValidatorPlugin) for item in plugins):
            return plugins
    raise TypeError(f"entry point '{entry.name}' did not provide ValidatorPlugin objects")


def discover_entry_point_plugins(group: str = PLUGIN_ENTRY_POINT_GROUP) -> tuple[ValidatorPlugin, ...]:
    """Return plugins contributed by installed distributions under ``group``.

    Entries that fail to import are logged and skipped so a broken third-party
    package cannot prevent the built-in validators from running.
    """

    discovered: list[ValidatorPlugin] = []
    for entry in metadata.entry_points(group=group):
        try:
            discovered.extend(_coerce_entry_point(entry))
        except (AttributeError, ImportError, TypeError, ValueError, RuntimeError) as exc:
            LOGGER.warning("Failed to load plugin entry point %s: %s", entry.name, exc)
    return tuple(discovered)


def discover_entry_point_operators(group: str = OPERATOR_ENTRY_POINT_GROUP) -> tuple[tuple[str, Operator], ...]:
    """Return ``(name, operator)`` pairs contributed under ``group``.

    The entry point name is the operator name used in rule definitions; the
    entry point must load a callable. Failures are logged and skipped.
    """

    discovered: list[tuple[str, Operator]] = []
    for entry in metadata.entry_points(group=group):
        try:
            loaded = entry.load()
        except (AttributeError, ImportError, ValueError, RuntimeError) as exc:
            LOGGER.warning("Failed to load operator entry point %s: %s", entry.name, exc)
            continue
        if not callable(loaded):
            LOGGER.warning("Operator entry point %s did not provide a callable", entry.name)
            continue
        discovered.append((entry.name, loaded))
    return tuple(discovered)


def default_registry(*, include_entry_points: bool = True) -> PluginRegistry:
    """Return a registry populated with the built-in and installed plugins and operators.

    Args:
        include_entry_points: Whether to discover plugins from installed packages.

    Returns:
        PluginRegistry: Registry ready for validator loading and execution.
    """

    registry = PluginRegistry([RULES_PLUGIN])
    if include_entry_points:
        for plugin in discover_entry_point_plugins():
            if plugin.plugin_id in registry:
                LOGGER.warning("Ignoring duplicate plugin id '%s' from entry points", plugin.plugin_id)
                continue
            registry.register(plugin)
        for name, operator in discover_entry_point_operators():
            if name in BUILTIN_OPERATOR_NAMES or name in registry.operators:
                LOGGER.warning("Ignoring duplicate operator '%s' from entry points", name)
                continue
            registry.register_operator(name, operator)
    return registry


__all__ = [
    "OPERATOR_ENTRY_POINT_GROUP",
    "PLUGIN_ENTRY_POINT_GROUP",
    "PluginRegistry",
    "default_registry",
    "discover_entry_point_operators",
    "discover_entry_point_plugins",
]
