# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Schema loading utilities for validating definition documents."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from jsonschema import Draft202012Validator

from ..models import JsonValue
from .io import format_schema_errors, load_schema

VALIDATOR_SCHEMA: Final[str] = "validator.schema.json"
PROFILE_SCHEMA: Final[str] = "profile.schema.json"


@dataclass(frozen=True, slots=True)
class SchemaRepository:
    """Bundle the jsonschema validators applied to catalog documents."""

    validator_schema: Draft202012Validator
    profile_schema: Draft202012Validator

    @classmethod
    def load(cls) -> SchemaRepository:
        """Load the bundled validator and profile schemas.

        Returns:
            SchemaRepository: Repository configured with both validators.
        """

        return cls(
            validator_schema=Draft202012Validator(load_schema(VALIDATOR_SCHEMA)),
            profile_schema=Draft202012Validator(load_schema(PROFILE_SCHEMA)),
        )

    def validator_problems(self, document: Mapping[str, JsonValue]) -> list[str]:
        """Return schema violations for a validator definition document."""

        return _problems(self.validator_schema, document)

    def profile_problems(self, document: Mapping[str, JsonValue]) -> list[str]:
        """Return schema violations for a profile document."""

        return _problems(self.profile_schema, document)


def _error_sort_key(error: Any) -> list[str]:
    return [str(part) for part in error.absolute_path]


def _problems(validator: Draft202012Validator, document: Mapping[str, JsonValue]) -> list[str]:
    errors = sorted(validator.iter_errors(document), key=_error_sort_key)
    return format_schema_errors(errors)


def plugin_config_problems(
    schema: Mapping[str, Any] | None,
    config: Mapping[str, JsonValue],
) -> list[str]:
    """Return problems found validating ``config`` against a plugin's declared schema.

    Args:
        schema: JSON schema for the validator ``config`` block, or ``None``.
        config: Configuration block taken from the validator definition.

    Returns:
        list[str]: ``config/<path>: message`` entries; empty when valid.
    """

    if schema is None:
        return []
    validator = Draft202012Validator(dict(schema))
    errors = sorted(validator.iter_errors(dict(config)), key=_error_sort_key)
    return [f"config/{problem}" for problem in format_schema_errors(errors)]


__all__ = ["PROFILE_SCHEMA", "VALIDATOR_SCHEMA", "SchemaRepository", "plugin_config_problems"]
