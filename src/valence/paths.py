# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Path keys shared by violations, overrides and reports."""

from __future__ import annotations

import os
import posixpath
from os import PathLike
from pathlib import Path

_Pathish = str | PathLike[str] | Path


def normalize_path_key(path: _Pathish | None) -> str:
    """Return the lexical key used to compare file paths across runs.

    The key never touches the filesystem: separators become ``/``, redundant
    ``.`` segments collapse and a leading ``./`` is dropped, so the same file
    reported by different plugins (or recorded in an earlier run) compares
    equal.

    Args:
        path: Path reported by a plugin or stored in an override record.

    Returns:
        str: POSIX-style normalised representation, ``""`` for ``None``.
    """

    if path is None:
        return ""
    text = os.fspath(path).strip().replace("\\", "/")
    if not text:
        return ""
    normalised = posixpath.normpath(text)
    return "" if normalised == "." else normalised


__all__ = ["normalize_path_key"]
