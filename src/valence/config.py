# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the valence validation engine."""

from __future__ import annotations

import math
import os
from enum import Enum
from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigError

DEFAULT_OVERRIDES_FILE: Final[str] = ".valence-overrides.json"
DEFAULT_REPORT_DIR: Final[str] = "reports"
DEFAULT_CONFIDENCE_THRESHOLD: Final[float] = 0.7
DEFAULT_EXCLUDES: Final[tuple[str, ...]] = ("node_modules", ".git")

ReportFormat = Literal["json", "markdown", "html", "sarif"]
DEFAULT_REPORT_FORMATS: Final[tuple[ReportFormat, ...]] = ("json", "markdown", "html")


def default_parallel_jobs() -> int:
    """Return 75% of available CPU cores (minimum of 1)."""
    cores = os.cpu_count() or 1
    proposed = max(1, math.floor(cores * 0.75))
    return proposed


class MatchStrictness(str, Enum):
    """Enumerate how precisely an override must match a violation."""

    FILE = "file"
    LINE = "line"


class CatalogConfig(BaseModel):
    """Locations of validator and profile definitions."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    root: Path = Field(default_factory=Path)
    validators_dir: str = "validators"
    profiles_dir: str = "profiles"


class ExecutionConfig(BaseModel):
    """Execution behaviour for validator runs."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    excludes: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDES))


class FilteringConfig(BaseModel):
    """Post-processing applied to raw validator results."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    confidence_threshold: float | None = Field(default=DEFAULT_CONFIDENCE_THRESHOLD, ge=0.0, le=1.0)
    apply_overrides: bool = True


class OverridesConfig(BaseModel):
    """Location and matching behaviour of the override store."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    path: Path = Field(default_factory=lambda: Path(DEFAULT_OVERRIDES_FILE))
    match_on: MatchStrictness = MatchStrictness.FILE


class OutputConfig(BaseModel):
    """Configuration for controlling output, reporting, and artifact creation."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    color: bool = True
    emoji: bool = True
    report_dir: Path = Field(default_factory=lambda: Path(DEFAULT_REPORT_DIR))
    formats: tuple[ReportFormat, ...] = DEFAULT_REPORT_FORMATS
    low_confidence_threshold: float = Field(default=DEFAULT_CONFIDENCE_THRESHOLD, ge=0.0, le=1.0)

    @field_validator("formats", mode="before")
    @classmethod
    def _dedupe_formats(cls, value: Any) -> Any:
        """Preserve declaration order while dropping duplicate formats."""

        if isinstance(value, (list, tuple)):
            return tuple(dict.fromkeys(value))
        return value


class Config(BaseModel):
    """Top-level configuration composed of the individual sections."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)
    overrides: OverridesConfig = Field(default_factory=OverridesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping of the configuration."""

        return self.model_dump(mode="json")

    def resolve_paths(self, root: Path) -> Config:
        """Return a copy whose relative paths are anchored at ``root``.

        Args:
            root: Project root the configuration was loaded for.

        Returns:
            Config: Configuration with absolute catalog, override and report paths.
        """

        def anchor(path: Path) -> Path:
            return path if path.is_absolute() else root / path

        return self.model_copy(
            update={
                "catalog": self.catalog.model_copy(update={"root": anchor(self.catalog.root)}),
                "overrides": self.overrides.model_copy(update={"path": anchor(self.overrides.path)}),
                "output": self.output.model_copy(update={"report_dir": anchor(self.output.report_dir)}),
            },
        )


__all__ = [
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "DEFAULT_EXCLUDES",
    "DEFAULT_OVERRIDES_FILE",
    "DEFAULT_REPORT_DIR",
    "DEFAULT_REPORT_FORMATS",
    "CatalogConfig",
    "Config",
    "ConfigError",
    "ExecutionConfig",
    "FilteringConfig",
    "MatchStrictness",
    "OutputConfig",
    "OverridesConfig",
    "ReportFormat",
    "default_parallel_jobs",
]
