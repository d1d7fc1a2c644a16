# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""I/O helpers for reading definition documents and schemas."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from importlib import resources
from pathlib import Path
from typing import cast

from ..models import JsonValue


class DocumentError(ValueError):
    """Raised when a definition document is not valid JSON."""


def load_schema(name: str) -> Mapping[str, JsonValue]:
    """Load a bundled JSON schema by file name.

    Args:
        name: File name under the package ``schema`` directory.

    Returns:
        Mapping[str, JsonValue]: Parsed JSON schema mapping.
    """

    text = resources.files("valence.catalog").joinpath("schema", name).read_text(encoding="utf-8")
    payload = cast(JsonValue, json.loads(text))
    return _ensure_json_object(payload, context=name)


def load_document(path: Path) -> Mapping[str, JsonValue]:
    """Load a JSON object from disk.

    Args:
        path: Filesystem path to the JSON document.

    Returns:
        Mapping[str, JsonValue]: Parsed JSON object.

    Raises:
        FileNotFoundError: If the JSON document is missing.
        DocumentError: If the document cannot be parsed or is not a JSON object.
    """
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as stream:
        try:
            payload = cast(JsonValue, json.load(stream))
        except json.JSONDecodeError as exc:
            raise DocumentError(f"{path}: failed to parse JSON ({exc.msg} at line {exc.lineno})") from exc
    return _ensure_json_object(payload, context=str(path))


def _ensure_json_object(value: JsonValue, *, context: str) -> Mapping[str, JsonValue]:
    """Ensure ``value`` is a JSON object, raising on type mismatch."""

    if not isinstance(value, Mapping):
        raise DocumentError(f"{context}: expected a JSON object")
    return value


def format_schema_errors(errors: Sequence[object]) -> list[str]:
    """Render jsonschema errors as ``path: message`` strings."""

    problems: list[str] = []
    for error in errors:
        location = "/".join(str(part) for part in getattr(error, "absolute_path", ())) or "<root>"
        problems.append(f"{location}: {getattr(error, 'message', error)}")
    return problems


__all__ = ["DocumentError", "format_schema_errors", "load_document", "load_schema"]
