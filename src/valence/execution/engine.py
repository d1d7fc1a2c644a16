# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run validators against a shared candidate file list with failure isolation."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from ..errors import ValidatorExecutionError
from ..models import ValidationResult, ValidatorDefinition
from ..plugins import PluginContext, PluginOutput, PluginRegistry
from .normalize import normalize_output

LOGGER = logging.getLogger(__name__)


async def _await_output(awaitable: Awaitable[PluginOutput]) -> PluginOutput:
    return await awaitable


def _resolve_awaitable(awaitable: Awaitable[PluginOutput]) -> PluginOutput:
    """Drive ``awaitable`` to completion from synchronous code.

    When the calling thread already runs an event loop, the awaitable gets a
    fresh loop on a helper thread since ``asyncio.run`` cannot nest.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await_output(awaitable))
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="valence-async") as executor:
        return executor.submit(asyncio.run, _await_output(awaitable)).result()


@dataclass(slots=True)
class ExecutionEngine:
    """Evaluate validators through their registered plugins.

    Every validator sees the full candidate list. Results come back in input
    order whether the run is serial or spread over a bounded thread pool, and a
    plugin failure only ever affects the result of its own validator.
    """

    registry: PluginRegistry
    root: Path = field(default_factory=Path)
    jobs: int = 1

    def run(self, validators: Sequence[ValidatorDefinition], files: Sequence[str]) -> list[ValidationResult]:
        """Evaluate ``validators`` over ``files``.

        Args:
            validators: Definitions to run, in report order.
            files: Candidate file paths relative to :attr:`root`.

        Returns:
            list[ValidationResult]: One result per validator, in input order.
        """

        candidates = tuple(files)
        if self.jobs <= 1 or len(validators) <= 1:
            return [self.run_one(validator, candidates) for validator in validators]

        results: list[ValidationResult | None] = [None] * len(validators)
        with ThreadPoolExecutor(max_workers=min(self.jobs, len(validators))) as executor:
            future_map = {
                executor.submit(self.run_one, validator, candidates): index for index, validator in enumerate(validators)
            }
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()
        return [cast(ValidationResult, result) for result in results]

    def run_one(self, validator: ValidatorDefinition, files: tuple[str, ...]) -> ValidationResult:
        """Evaluate a single validator, converting any plugin failure into a failed result."""

        started = time.perf_counter()
        try:
            result = self._evaluate(validator, files)
        except Exception as exc:  # noqa: BLE001 - any plugin failure becomes a failed result
            error = exc if isinstance(exc, ValidatorExecutionError) else ValidatorExecutionError(validator.id, exc)
            LOGGER.error("%s", error, exc_info=not isinstance(exc, ValidatorExecutionError))
            result = ValidationResult(
                validator=validator.id,
                validator_name=validator.name,
                message=error.summary,
                error=error.summary,
            )
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        return result.model_copy(update={"duration_ms": round(elapsed_ms, 3)})

    def _evaluate(self, validator: ValidatorDefinition, files: tuple[str, ...]) -> ValidationResult:
        plugin = self.registry.try_get(validator.plugin)
        if plugin is None:
            raise ValidatorExecutionError(validator.id, f"plugin '{validator.plugin}' is not registered")
        context = PluginContext(validator=validator, files=files, root=self.root, operators=self.registry.operators)
        output = plugin.evaluate(context)
        if inspect.isawaitable(output):
            output = _resolve_awaitable(output)
        return normalize_output(validator, cast(PluginOutput, output))


def run_validators(
    validators: Sequence[ValidatorDefinition],
    files: Sequence[str],
    *,
    registry: PluginRegistry,
    root: Path | None = None,
    jobs: int = 1,
) -> list[ValidationResult]:
    """Run ``validators`` over ``files`` and return their results in input order.

    Args:
        validators: Definitions to evaluate.
        files: Candidate file paths shared by every validator.
        registry: Registry resolving each validator's plugin.
        root: Directory relative file paths are resolved against.
        jobs: Maximum number of validators evaluated concurrently.

    Returns:
        list[ValidationResult]: One result per validator.
    """

    engine = ExecutionEngine(registry=registry, root=root if root is not None else Path(), jobs=jobs)
    return engine.run(validators, files)


__all__ = ["ExecutionEngine", "run_validators"]
