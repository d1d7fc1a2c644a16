# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High-level loader that materialises validator and profile definitions."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from ..errors import (
    ConfigError,
    ProfileNotFoundError,
    ValidatorConfigError,
    ValidatorLoadError,
    ValidatorNotFoundError,
)
from ..models import JsonValue, Profile, ValidatorDefinition, ValidatorType
from ..plugins import RULES_PLUGIN_ID, PluginRegistry
from .io import DocumentError, load_document
from .schema import SchemaRepository, plugin_config_problems

LOGGER = logging.getLogger(__name__)

DEFINITION_SUFFIX: Final[str] = ".json"
_SAFE_ID: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


@dataclass(slots=True)
class ValidatorLoader:
    """Loader that validates and materialises catalog validator definitions."""

    catalog_root: Path
    registry: PluginRegistry
    validators_dir: str = "validators"
    profiles_dir: str = "profiles"
    _schemas: SchemaRepository = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Load the bundled schemas after dataclass setup."""

        self.catalog_root = Path(self.catalog_root)
        self._schemas = SchemaRepository.load()

    @property
    def validators_root(self) -> Path:
        """Return the directory holding ``<id>.json`` validator documents."""

        return self.catalog_root / self.validators_dir

    @property
    def profiles_root(self) -> Path:
        """Return the directory holding ``<name>.json`` profile documents."""

        return self.catalog_root / self.profiles_dir

    def load_validator(self, validator_id: str) -> ValidatorDefinition:
        """Load and validate a single validator definition.

        Args:
            validator_id: Identifier matching the definition file stem.

        Returns:
            ValidatorDefinition: Validated, immutable definition.

        Raises:
            ValidatorNotFoundError: If no definition exists or its plugin is not registered.
            ValidatorConfigError: If the definition fails schema or plugin validation.
        """

        if not _SAFE_ID.match(validator_id):
            raise ValidatorNotFoundError(validator_id, "identifier contains unsupported characters")
        path = self.validators_root / f"{validator_id}{DEFINITION_SUFFIX}"
        try:
            document = load_document(path)
        except FileNotFoundError as exc:
            raise ValidatorNotFoundError(validator_id, f"no definition at {path}") from exc
        except DocumentError as exc:
            raise ValidatorConfigError(validator_id, [str(exc)]) from exc

        problems = self._schemas.validator_problems(document)
        if problems:
            raise ValidatorConfigError(validator_id, problems)
        declared_id = document.get("id", validator_id)
        if declared_id != validator_id:
            raise ValidatorConfigError(
                validator_id,
                [f"id: declared id '{declared_id}' does not match file name '{validator_id}'"],
            )

        definition = self._materialise(validator_id, document, path)
        plugin = self.registry.try_get(definition.plugin)
        if plugin is None:
            raise ValidatorNotFoundError(validator_id, f"plugin '{definition.plugin}' is not registered")
        config_problems = plugin_config_problems(plugin.config_schema, definition.config)
        if config_problems:
            raise ValidatorConfigError(validator_id, config_problems)
        if definition.plugin == RULES_PLUGIN_ID and not definition.rules:
            raise ValidatorConfigError(validator_id, ["rules: at least one rule is required"])
        LOGGER.debug("Loaded validator %s from %s", validator_id, path)
        return definition

    def load_validators(self, validator_ids: Iterable[str]) -> list[ValidatorDefinition]:
        """Load several validators, reporting every failure at once.

        Duplicate ids are loaded once and keep their first position.

        Args:
            validator_ids: Identifiers to load in order.

        Returns:
            list[ValidatorDefinition]: Definitions in request order.

        Raises:
            ValidatorLoadError: If one or more ids could not be loaded.
        """

        definitions: list[ValidatorDefinition] = []
        failures: dict[str, ValidatorNotFoundError | ValidatorConfigError] = {}
        for validator_id in dict.fromkeys(validator_ids):
            try:
                definitions.append(self.load_validator(validator_id))
            except (ValidatorNotFoundError, ValidatorConfigError) as exc:
                failures[validator_id] = exc
        if failures:
            raise ValidatorLoadError(failures)
        return definitions

    def load_profile_definition(self, name: str) -> Profile:
        """Load the raw profile document named ``name``.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            ConfigError: If the profile document is malformed.
        """

        path = self.profiles_root / f"{name}{DEFINITION_SUFFIX}"
        if not _SAFE_ID.match(name) or not path.is_file():
            raise ProfileNotFoundError(name, self.list_profiles())
        try:
            document = load_document(path)
        except DocumentError as exc:
            raise ConfigError(str(exc)) from exc
        problems = self._schemas.profile_problems(document)
        if problems:
            raise ConfigError(f"Invalid profile '{name}': {'; '.join(problems)}")
        return Profile(
            name=str(document.get("name", name)),
            description=str(document.get("description", "")),
            validators=tuple(str(item) for item in _as_list(document.get("validators"))),
            source=path,
        )

    def load_profile(self, name: str) -> list[ValidatorDefinition]:
        """Load every validator referenced by profile ``name``.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            ValidatorLoadError: If any referenced validator fails to load.
        """

        profile = self.load_profile_definition(name)
        return self.load_validators(profile.validators)

    def list_validators(self) -> list[str]:
        """Return validator ids available in the catalog, sorted."""

        return _list_stems(self.validators_root)

    def list_profiles(self) -> list[str]:
        """Return profile names available in the catalog, sorted."""

        return _list_stems(self.profiles_root)

    def _materialise(
        self,
        validator_id: str,
        document: Mapping[str, JsonValue],
        path: Path,
    ) -> ValidatorDefinition:
        payload = dict(document)
        payload["id"] = validator_id
        payload.setdefault("type", ValidatorType.CONTENT.value if "rules" in payload else ValidatorType.PLUGIN.value)
        file_pattern = payload.get("filePattern", payload.get("file_pattern"))
        if isinstance(file_pattern, str):
            try:
                re.compile(file_pattern)
            except re.error as exc:
                raise ValidatorConfigError(
                    validator_id,
                    [f"filePattern: invalid regular expression {file_pattern!r} ({exc})"],
                ) from exc
        try:
            return ValidatorDefinition.model_validate({**payload, "source": path})
        except ValidationError as exc:
            problems = [
                f"{'/'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
            ]
            raise ValidatorConfigError(validator_id, problems) from exc


def _as_list(value: JsonValue) -> list[JsonValue]:
    return list(value) if isinstance(value, list) else []


def _list_stems(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(path.stem for path in directory.glob(f"*{DEFINITION_SUFFIX}") if path.is_file())


__all__ = ["DEFINITION_SUFFIX", "ValidatorLoader"]
