# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Contract implemented by validator plugins.

A plugin is a pure function of its :class:`PluginContext` (the validator's
configuration plus the shared candidate file list). It may be synchronous or
return an awaitable, may raise, and must not share mutable state with other
plugins. The execution engine normalises whatever it returns into a
:class:`~valence.models.ValidationResult`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from ..models import JsonValue, ValidationResult, ValidatorDefinition, Violation


class PluginReport(BaseModel):
    """Loosely structured result a plugin may return instead of a full result."""

    model_config = ConfigDict(frozen=True)

    passed: bool | None = None
    message: str = ""
    violations: tuple[Violation, ...] = Field(default_factory=tuple)
    details: tuple[str, ...] = Field(default_factory=tuple)


PluginOutput: TypeAlias = (
    ValidationResult | PluginReport | Mapping[str, Any] | Iterable[Violation | Mapping[str, Any]] | None
)
Evaluator: TypeAlias = Callable[["PluginContext"], PluginOutput | Awaitable[PluginOutput]]


@dataclass(frozen=True, slots=True)
class Match:
    """Location of the text that satisfied (or violated) a rule operator."""

    line: int | None = None
    excerpt: str | None = None


# An operator receives the subject text, the rule value and the context; it
# returns the match location, or ``None`` when the subject does not match.
Operator: TypeAlias = Callable[[str, JsonValue, "PluginContext"], Match | None]


@dataclass(frozen=True, slots=True)
class PluginContext:
    """Inputs handed to a plugin for a single validator evaluation."""

    validator: ValidatorDefinition
    files: tuple[str, ...]
    root: Path = field(default_factory=Path)
    operators: Mapping[str, Operator] = field(default_factory=dict)

    @property
    def config(self) -> Mapping[str, JsonValue]:
        """Return the validator-specific configuration block."""

        return self.validator.config

    def target_files(self) -> tuple[str, ...]:
        """Return the candidate files selected by the validator's file pattern.

        Returns:
            tuple[str, ...]: Files whose path matches ``file_pattern``; every
            candidate when the validator declares no pattern.
        """

        pattern = self.validator.compiled_pattern
        if pattern is None:
            return self.files
        return tuple(path for path in self.files if pattern.search(path))

    def resolve(self, path: str) -> Path:
        """Return ``path`` anchored at the run root."""

        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    def read_text(self, path: str) -> str:
        """Return the UTF-8 contents of ``path`` relative to the run root."""

        return self.resolve(path).read_text(encoding="utf-8")


@dataclass(frozen=True, slots=True)
class ValidatorPlugin:
    """Statically registered analysis unit referenced by validator definitions."""

    plugin_id: str
    evaluate: Evaluator
    description: str = ""
    config_schema: Mapping[str, Any] | None = None


__all__ = [
    "Evaluator",
    "Match",
    "Operator",
    "PluginContext",
    "PluginOutput",
    "PluginReport",
    "ValidatorPlugin",
]
