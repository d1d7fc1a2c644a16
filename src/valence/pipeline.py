# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end validation pipeline: load, execute, suppress, filter, report."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import ValidatorLoader
from .execution import ExecutionEngine
from .filtering import filter_by_threshold
from .models import Report, ValidatorDefinition
from .overrides import OverrideStore
from .plugins import PluginRegistry
from .reporting import build_report

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunRequest:
    """Describe which validators to run over which files.

    Exactly one of :attr:`profile`, :attr:`validator` or :attr:`validators`
    must be provided.
    """

    files: tuple[str, ...]
    profile: str | None = None
    validator: str | None = None
    validators: tuple[str, ...] = ()
    confidence_threshold: float | None = None
    apply_overrides: bool = True

    def __post_init__(self) -> None:
        """Reject requests that do not select exactly one validator source."""

        selected = sum(1 for value in (self.profile, self.validator, self.validators) if value)
        if selected != 1:
            raise ValueError("specify exactly one of profile, validator or validators")
        if self.confidence_threshold is not None and not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(f"confidence threshold must be between 0 and 1, got {self.confidence_threshold}")


@dataclass(slots=True)
class ValidationPipeline:
    """Wire the loader, engine, override store and filter into a single run."""

    loader: ValidatorLoader
    registry: PluginRegistry
    override_store: OverrideStore | None = None
    jobs: int = 1
    root: Path = field(default_factory=Path)

    def resolve(self, request: RunRequest) -> list[ValidatorDefinition]:
        """Load the validators selected by ``request``.

        Raises:
            ProfileNotFoundError: If the requested profile does not exist.
            ValidatorNotFoundError: If a requested validator cannot be resolved.
            ValidatorConfigError: If a requested validator definition is invalid.
        """

        if request.profile:
            return self.loader.load_profile(request.profile)
        if request.validator:
            return [self.loader.load_validator(request.validator)]
        return self.loader.load_validators(request.validators)

    def execute(
        self,
        request: RunRequest,
        validators: Sequence[ValidatorDefinition] | None = None,
    ) -> Report:
        """Run ``request`` and return the final report.

        Args:
            request: Validators, files and filtering options for the run.
            validators: Definitions already returned by :meth:`resolve`.

        Returns:
            Report: Report built from the filtered results.
        """

        definitions = list(validators) if validators is not None else self.resolve(request)
        engine = ExecutionEngine(registry=self.registry, root=self.root, jobs=self.jobs)
        results = engine.run(definitions, request.files)

        store = self.override_store if request.apply_overrides else None
        if store is not None:
            results = store.apply_overrides(results)
        results = filter_by_threshold(results, request.confidence_threshold)
        LOGGER.debug("Completed run of %d validator(s) over %d file(s)", len(definitions), len(request.files))

        return build_report(
            results,
            files_analyzed=len(request.files),
            confidence_threshold=request.confidence_threshold,
            validators=[definition.id for definition in definitions],
            profile=request.profile,
            overrides_applied=store is not None,
        )


__all__ = ["RunRequest", "ValidationPipeline"]
