# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading utilities with layered precedence."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .config import Config
from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PROJECT_CONFIG_FILENAME: Final[str] = ".valence.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "valence"


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> dict[str, Any]:
    """Return the TOML document stored at ``path`` (empty when missing).

    Raises:
        ConfigError: If the document cannot be parsed.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _pyproject_section(path: Path) -> dict[str, Any]:
    """Return the ``[tool.valence]`` table from ``pyproject.toml``."""

    document = _read_toml(path)
    tool_section = document.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    valence_section = tool_section.get(PYPROJECT_SECTION_KEY)
    if valence_section is None:
        return {}
    if not isinstance(valence_section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return dict(valence_section)


def load_config(root: Path, *, config_file: Path | None = None) -> Config:
    """Load configuration for the project rooted at ``root``.

    Layers are merged in order: built-in defaults, ``[tool.valence]`` in
    ``pyproject.toml``, then ``.valence.toml`` (or ``config_file`` when
    given). Relative paths are anchored at ``root``.

    Args:
        root: Project root directory.
        config_file: Optional explicit configuration file replacing ``.valence.toml``.

    Returns:
        Config: Validated configuration.

    Raises:
        ConfigError: If a layer cannot be parsed or fails validation.
    """

    merged: dict[str, Any] = Config().to_dict()
    layers: list[tuple[Path, dict[str, Any]]] = [(root / PYPROJECT_FILENAME, _pyproject_section(root / PYPROJECT_FILENAME))]
    project_file = config_file if config_file is not None else root / PROJECT_CONFIG_FILENAME
    if config_file is not None and not config_file.is_file():
        raise ConfigError(f"Configuration file not found: {config_file}")
    layers.append((project_file, _read_toml(project_file)))

    for source, fragment in layers:
        if fragment:
            LOGGER.debug("Applying configuration from %s", source)
            merged = _deep_merge(merged, fragment)

    try:
        config = Config.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid valence configuration: {exc}") from exc
    return config.resolve_paths(root)


__all__ = ["PROJECT_CONFIG_FILENAME", "load_config"]
