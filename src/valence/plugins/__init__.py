# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Validator plugin contract, registry and built-in plugins."""

from __future__ import annotations

from .base import Evaluator, Match, Operator, PluginContext, PluginOutput, PluginReport, ValidatorPlugin
from .registry import (
    OPERATOR_ENTRY_POINT_GROUP,
    PLUGIN_ENTRY_POINT_GROUP,
    PluginRegistry,
    default_registry,
    discover_entry_point_operators,
    discover_entry_point_plugins,
)
from .rules import RULES_PLUGIN, RULES_PLUGIN_ID

__all__ = [
    "OPERATOR_ENTRY_POINT_GROUP",
    "PLUGIN_ENTRY_POINT_GROUP",
    "RULES_PLUGIN",
    "RULES_PLUGIN_ID",
    "Evaluator",
    "Match",
    "Operator",
    "PluginContext",
    "PluginOutput",
    "PluginRegistry",
    "PluginReport",
    "ValidatorPlugin",
    "default_registry",
    "discover_entry_point_operators",
    "discover_entry_point_plugins",
]
