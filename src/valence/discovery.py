# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn glob patterns into the candidate file list shared by validators."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Final

from .config import DEFAULT_EXCLUDES

DEFAULT_PATTERN: Final[str] = "**/*"


def collect_files(
    patterns: str | Iterable[str] = DEFAULT_PATTERN,
    root: Path | None = None,
    *,
    excludes: Iterable[str] = DEFAULT_EXCLUDES,
) -> list[str]:
    """Return files under ``root`` matching ``patterns``.

    Args:
        patterns: Glob pattern (or patterns) relative to ``root``.
        root: Directory to search; the working directory when omitted.
        excludes: Directory names whose contents are never selected.

    Returns:
        list[str]: Sorted, de-duplicated POSIX paths relative to ``root``.
    """

    base = root if root is not None else Path.cwd()
    excluded = frozenset(excludes)
    selected: set[str] = set()
    for pattern in [patterns] if isinstance(patterns, str) else patterns:
        for candidate in base.glob(pattern):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(base)
            if excluded.intersection(relative.parts[:-1]):
                continue
            selected.add(relative.as_posix())
    return sorted(selected)


__all__ = ["DEFAULT_PATTERN", "collect_files"]
