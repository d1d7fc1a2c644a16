# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exception hierarchy shared across the valence package."""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class ValenceError(RuntimeError):
    """Base class for every error raised by valence."""


class ConfigError(ValenceError):
    """Raised when project configuration input is invalid."""


class ProfileNotFoundError(ValenceError):
    """Raised when a requested profile does not exist in the catalog."""

    def __init__(self, profile: str, available: Sequence[str] = ()) -> None:
        """Create the error for ``profile`` listing ``available`` alternatives."""

        self.profile = profile
        self.available = tuple(available)
        message = f"Unknown profile '{profile}'"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class ValidatorNotFoundError(ValenceError):
    """Raised when a validator id (or the plugin it references) cannot be resolved."""

    def __init__(self, validator_id: str, detail: str | None = None) -> None:
        """Create the error for ``validator_id`` with an optional ``detail``."""

        self.validator_id = validator_id
        self.detail = detail
        message = f"Unknown validator '{validator_id}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ValidatorConfigError(ValenceError):
    """Raised when a validator definition fails schema validation."""

    def __init__(self, validator_id: str, problems: Sequence[str]) -> None:
        """Create the error for ``validator_id`` listing each schema ``problem``."""

        self.validator_id = validator_id
        self.problems = tuple(problems)
        joined = "; ".join(self.problems) or "invalid configuration"
        super().__init__(f"Invalid configuration for validator '{validator_id}': {joined}")


class ValidatorLoadError(ValidatorNotFoundError, ValidatorConfigError):
    """Aggregate failure raised when a batch load could not resolve every id.

    Catchable as either :class:`ValidatorNotFoundError` or
    :class:`ValidatorConfigError`; inspect :attr:`failures` to tell them apart.
    """

    def __init__(self, failures: Mapping[str, ValidatorNotFoundError | ValidatorConfigError]) -> None:
        """Create the aggregate from the per-id ``failures`` mapping."""

        self.failures = dict(failures)
        self.validator_id = ", ".join(self.failures)
        self.detail = None
        self.problems = tuple(str(error) for error in self.failures.values())
        lines = [f"Failed to load {len(self.failures)} validator(s):"]
        lines.extend(f"  - {error}" for error in self.failures.values())
        ValenceError.__init__(self, "\n".join(lines))

    @property
    def missing(self) -> tuple[str, ...]:
        """Return ids that could not be found."""

        return tuple(
            validator_id
            for validator_id, error in self.failures.items()
            if isinstance(error, ValidatorNotFoundError) and not isinstance(error, ValidatorConfigError)
        )

    @property
    def invalid(self) -> tuple[str, ...]:
        """Return ids whose definitions failed validation."""

        return tuple(
            validator_id
            for validator_id, error in self.failures.items()
            if isinstance(error, ValidatorConfigError) and not isinstance(error, ValidatorNotFoundError)
        )


class ValidatorExecutionError(ValenceError):
    """Raised (and recovered) when a plugin fails while evaluating a validator."""

    def __init__(self, validator_id: str, cause: BaseException | str) -> None:
        """Create the error for ``validator_id`` wrapping ``cause``."""

        self.validator_id = validator_id
        if isinstance(cause, BaseException):
            summary = f"{type(cause).__name__}: {cause}" if str(cause) else type(cause).__name__
        else:
            summary = cause
        self.summary = summary
        super().__init__(f"Validator '{validator_id}' failed: {summary}")


class OverrideStoreError(ValenceError):
    """Raised when persisted override data cannot be read or written."""


class ReportGenerationError(ValenceError):
    """Raised when a report artifact cannot be produced."""


__all__ = [
    "ConfigError",
    "OverrideStoreError",
    "ProfileNotFoundError",
    "ReportGenerationError",
    "ValenceError",
    "ValidatorConfigError",
    "ValidatorExecutionError",
    "ValidatorLoadError",
    "ValidatorNotFoundError",
]
