# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Records persisted by the override store."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Final

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..config import MatchStrictness
from ..models import Violation
from ..paths import normalize_path_key

OVERRIDE_FILE_VERSION: Final[str] = "1.0"
RECENT_WINDOW_DAYS: Final[int] = 7
_KEY_SEPARATOR: Final[str] = "|"
_WILDCARD: Final[str] = "*"


class OverrideStatus(str, Enum):
    """Review state of an override; only approved overrides suppress."""

    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


# Status spellings written by earlier releases of the override file.
_STATUS_ALIASES: Final[dict[str, OverrideStatus]] = {
    "false_positive": OverrideStatus.APPROVED,
    "accepted": OverrideStatus.APPROVED,
}


class Override(BaseModel):
    """Explicit suppression of a rule for a file, judged a false positive."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule: str = Field(min_length=1)
    file_path: str = Field(validation_alias=AliasChoices("file_path", "filePath", "file"))
    reason: str = ""
    status: OverrideStatus = OverrideStatus.APPROVED
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        validation_alias=AliasChoices("created_at", "createdAt", "addedAt"),
    )
    line: int | None = None
    code_hash: str | None = Field(default=None, validation_alias=AliasChoices("code_hash", "codeHash"))
    message: str | None = None
    added_by: str | None = Field(default=None, validation_alias=AliasChoices("added_by", "addedBy", "user"))
    original_confidence: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("original_confidence", "originalConfidence"),
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def _normalize_file(cls, value: object) -> object:
        """Store file paths as lexical POSIX keys."""

        return normalize_path_key(value) if isinstance(value, str) else value

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: object) -> object:
        """Map legacy status spellings onto :class:`OverrideStatus`."""

        if isinstance(value, str):
            return _STATUS_ALIASES.get(value.strip().lower(), value.strip().lower())
        return value

    @field_validator("created_at", mode="after")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        """Interpret naive timestamps as UTC."""

        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)

    @property
    def key(self) -> str:
        """Return the identity under which the override is stored."""

        parts = (
            self.rule,
            self.file_path,
            self.code_hash or _WILDCARD,
            str(self.line) if self.line is not None else _WILDCARD,
        )
        return _KEY_SEPARATOR.join(parts)

    def matches(
        self,
        violation: Violation,
        file_path: str | None = None,
        *,
        strictness: MatchStrictness = MatchStrictness.FILE,
    ) -> bool:
        """Return whether this override targets ``violation``, ignoring status.

        ``rule`` and the normalised file path must be equal. An override that
        recorded a code hash only matches violations carrying the same hash,
        and ``MatchStrictness.LINE`` additionally requires the same line.
        """

        target = normalize_path_key(file_path if file_path is not None else violation.file_path)
        if self.rule != violation.rule or self.file_path != target:
            return False
        if self.code_hash is not None and self.code_hash != violation.code_hash:
            return False
        if strictness is MatchStrictness.LINE and self.line != violation.line:
            return False
        return True

    def suppresses(
        self,
        violation: Violation,
        file_path: str | None = None,
        *,
        strictness: MatchStrictness = MatchStrictness.FILE,
    ) -> bool:
        """Return whether this override is approved and matches ``violation``."""

        return self.status is OverrideStatus.APPROVED and self.matches(
            violation,
            file_path,
            strictness=strictness,
        )


class OverrideStatistics(BaseModel):
    """Aggregate counts describing the stored overrides."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    recent: int = 0
    by_rule: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)
    by_user: dict[str, int] = Field(default_factory=dict)


class OverrideCriteria(BaseModel):
    """Selection used by bulk remove and status updates; every set field must match."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str | None = None
    rule: str | None = None
    file_path: str | None = Field(default=None, validation_alias=AliasChoices("file_path", "filePath", "file"))
    status: OverrideStatus | None = None

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when no field constrains the selection."""

        return self.key is None and self.rule is None and self.file_path is None and self.status is None

    def selects(self, override: Override) -> bool:
        """Return whether ``override`` satisfies every populated criterion."""

        if self.key is not None and override.key != self.key:
            return False
        if self.rule is not None and override.rule != self.rule:
            return False
        if self.file_path is not None and override.file_path != normalize_path_key(self.file_path):
            return False
        return self.status is None or override.status is self.status

    @classmethod
    def coerce(cls, value: OverrideCriteria | Mapping[str, object] | str) -> OverrideCriteria:
        """Build criteria from an instance, a mapping of fields or a bare key."""

        if isinstance(value, OverrideCriteria):
            return value
        if isinstance(value, str):
            return cls(key=value)
        return cls.model_validate(dict(value))


__all__ = [
    "OVERRIDE_FILE_VERSION",
    "RECENT_WINDOW_DAYS",
    "Override",
    "OverrideCriteria",
    "OverrideStatistics",
    "OverrideStatus",
]
