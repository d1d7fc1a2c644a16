# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels normalising different plugin vocabularies."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


SEVERITY_ALIASES: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "critical": Severity.ERROR,
    "high": Severity.ERROR,
    "fatal": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "medium": Severity.WARNING,
    "info": Severity.INFO,
    "information": Severity.INFO,
    "notice": Severity.INFO,
    "note": Severity.INFO,
    "low": Severity.INFO,
}


def coerce_severity(value: Severity | str | None, default: Severity = Severity.ERROR) -> Severity:
    """Return the :class:`Severity` matching ``value``.

    Plugins report severities using whatever vocabulary suits them; anything
    unrecognised falls back to ``default`` so a typo never downgrades a finding.

    Args:
        value: Severity enum, alias string, or ``None``.
        default: Severity returned when ``value`` is missing or unknown.

    Returns:
        Severity: Normalised severity level.
    """

    if isinstance(value, Severity):
        return value
    if not value:
        return default
    return SEVERITY_ALIASES.get(str(value).strip().lower(), default)


_SEVERITY_TO_SARIF_LEVEL: Final[dict[Severity, str]] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}

_SEVERITY_ICONS: Final[dict[Severity, str]] = {
    Severity.ERROR: "🟥",
    Severity.WARNING: "🟨",
    Severity.INFO: "🟦",
}

_SEVERITY_STYLES: Final[dict[Severity, str]] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def severity_to_sarif(severity: Severity) -> str:
    """Map :class:`Severity` to a SARIF reporting level."""

    return _SEVERITY_TO_SARIF_LEVEL.get(severity, "warning")


def severity_icon(severity: Severity) -> str:
    """Return the emoji marker used by human readable renderings."""

    return _SEVERITY_ICONS.get(severity, "🔸")


def severity_style(severity: Severity) -> str:
    """Return the Rich style used when rendering ``severity``."""

    return _SEVERITY_STYLES.get(severity, "white")


__all__ = [
    "SEVERITY_ALIASES",
    "Severity",
    "coerce_severity",
    "severity_icon",
    "severity_style",
    "severity_to_sarif",
]
