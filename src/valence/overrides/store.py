# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Persisted store of accepted false positives."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path
from threading import RLock
from typing import Any

from pydantic import ValidationError

from ..config import DEFAULT_OVERRIDES_FILE, MatchStrictness
from ..errors import OverrideStoreError
from ..models import Suppression, ValidationResult, Violation
from .models import (
    OVERRIDE_FILE_VERSION,
    RECENT_WINDOW_DAYS,
    Override,
    OverrideCriteria,
    OverrideStatistics,
    OverrideStatus,
)

LOGGER = logging.getLogger(__name__)

CriteriaLike = OverrideCriteria | Mapping[str, Any] | str


class OverrideStore:
    """Own the override records for a project and persist every mutation.

    The store is the single writer of its file. Reads and writes of the
    in-memory set are serialised by a re-entrant lock, and the file is always
    rewritten through a temporary sibling followed by :func:`os.replace`.
    """

    def __init__(
        self,
        path: Path | str = DEFAULT_OVERRIDES_FILE,
        *,
        match_on: MatchStrictness = MatchStrictness.FILE,
        autoload: bool = True,
    ) -> None:
        """Create a store bound to ``path``.

        Args:
            path: Location of the persisted override file.
            match_on: How precisely overrides must match violations.
            autoload: Whether to read ``path`` immediately.
        """

        self.path = Path(path)
        self.match_on = MatchStrictness(match_on)
        self._lock = RLock()
        self._overrides: dict[str, Override] = {}
        if autoload:
            self.load_overrides()

    def __len__(self) -> int:
        with self._lock:
            return len(self._overrides)

    def load_overrides(self) -> None:
        """Replace the in-memory set with the contents of :attr:`path`.

        A missing file yields an empty store. A malformed file is logged and
        also yields an empty store.
        """

        with self._lock:
            try:
                self._overrides = self._read()
            except OverrideStoreError as exc:
                LOGGER.warning("Ignoring override file: %s", exc)
                self._overrides = {}

    def is_overridden(self, violation: Violation, file_path: str | None = None) -> bool:
        """Return whether an approved override suppresses ``violation``."""

        return self.get_override(violation, file_path, approved_only=True) is not None

    def get_override(
        self,
        violation: Violation,
        file_path: str | None = None,
        *,
        approved_only: bool = False,
    ) -> Override | None:
        """Return the first override matching ``violation``.

        Args:
            violation: Violation to look up.
            file_path: File to match instead of ``violation.file_path``.
            approved_only: Whether to ignore pending and rejected overrides.

        Returns:
            Override | None: Matching override, if any.
        """

        with self._lock:
            for override in self._overrides.values():
                if approved_only:
                    if override.suppresses(violation, file_path, strictness=self.match_on):
                        return override
                elif override.matches(violation, file_path, strictness=self.match_on):
                    return override
        return None

    def add_override(self, record: Override | Mapping[str, Any]) -> Override:
        """Insert ``record`` (replacing any override with the same key) and persist.

        Raises:
            OverrideStoreError: If the record is invalid or cannot be persisted.
        """

        override = _coerce_override(record)

        def _insert(overrides: dict[str, Override]) -> None:
            overrides[override.key] = override

        with self._lock:
            self._mutate(_insert)
        LOGGER.info("Added override %s", override.key)
        return override

    def add_override_for(
        self,
        violation: Violation,
        reason: str,
        *,
        file_path: str | None = None,
        added_by: str | None = None,
        status: OverrideStatus = OverrideStatus.APPROVED,
    ) -> Override:
        """Record an override built from a reported ``violation``.

        Raises:
            OverrideStoreError: If the violation has no file or the store cannot be persisted.
        """

        target = file_path if file_path is not None else violation.file_path
        if not target:
            raise OverrideStoreError(f"Cannot override rule '{violation.rule}' without a file path")
        return self.add_override(
            Override(
                rule=violation.rule,
                file_path=target,
                reason=reason,
                status=status,
                line=violation.line,
                code_hash=violation.code_hash,
                message=violation.message,
                added_by=added_by,
                original_confidence=violation.confidence,
            ),
        )

    def remove_override(self, criteria: CriteriaLike) -> int:
        """Remove every override matching ``criteria`` and persist.

        Args:
            criteria: Key, mapping of fields or :class:`OverrideCriteria`.

        Returns:
            int: Number of overrides removed.

        Raises:
            ValueError: If ``criteria`` does not constrain the selection.
            OverrideStoreError: If the store cannot be persisted.
        """

        selection = _require_criteria(criteria)
        with self._lock:
            doomed = [key for key, override in self._overrides.items() if selection.selects(override)]
            if doomed:

                def _drop(overrides: dict[str, Override]) -> None:
                    for key in doomed:
                        del overrides[key]

                self._mutate(_drop)
        return len(doomed)

    def set_status(self, criteria: CriteriaLike, status: OverrideStatus | str) -> int:
        """Change the status of every override matching ``criteria`` and persist.

        Returns:
            int: Number of overrides whose status changed.
        """

        selection = _require_criteria(criteria)
        target = OverrideStatus(status)
        with self._lock:
            changed = {
                key: override.model_copy(update={"status": target})
                for key, override in self._overrides.items()
                if selection.selects(override) and override.status is not target
            }
            if changed:
                self._mutate(lambda overrides: overrides.update(changed))
        return len(changed)

    def list_overrides(self) -> list[Override]:
        """Return every stored override ordered by creation time."""

        with self._lock:
            return sorted(self._overrides.values(), key=lambda override: (override.created_at, override.key))

    def get_override_statistics(self, now: datetime | None = None) -> OverrideStatistics:
        """Summarise the stored overrides.

        Args:
            now: Reference time for the recent window; defaults to the current time.

        Returns:
            OverrideStatistics: Totals grouped by rule, status and author.
        """

        reference = now or datetime.now(UTC)
        cutoff = reference - timedelta(days=RECENT_WINDOW_DAYS)
        overrides = self.list_overrides()
        return OverrideStatistics(
            total=len(overrides),
            recent=sum(1 for override in overrides if cutoff < override.created_at <= reference),
            by_rule=dict(Counter(override.rule for override in overrides)),
            by_status=dict(Counter(override.status.value for override in overrides)),
            by_user=dict(Counter(override.added_by or "unknown" for override in overrides)),
        )

    def export_overrides(self) -> dict[str, Any]:
        """Return a portable payload containing every override."""

        return {
            "version": OVERRIDE_FILE_VERSION,
            "exported_at": datetime.now(UTC).isoformat(),
            "overrides": [override.model_dump(mode="json") for override in self.list_overrides()],
        }

    def import_overrides(self, payload: Mapping[str, Any], *, merge: bool = True) -> int:
        """Load overrides from an exported ``payload`` and persist.

        Args:
            payload: Document produced by :meth:`export_overrides` or an override file.
            merge: Keep existing overrides when ``True``; replace them otherwise.

        Returns:
            int: Number of overrides held after the import.

        Raises:
            OverrideStoreError: If the payload is malformed or cannot be persisted.
        """

        incoming = _parse_payload(payload, source="import payload")

        def _apply(overrides: dict[str, Override]) -> None:
            if not merge:
                overrides.clear()
            overrides.update(incoming)

        with self._lock:
            self._mutate(_apply)
            return len(self._overrides)

    def apply_overrides(self, results: Sequence[ValidationResult]) -> list[ValidationResult]:
        """Move overridden violations of each result into ``suppressed``.

        Each suppressed violation records the key, reason, author and creation
        time of the override that hid it. Applying the pass twice yields the
        same results as applying it once.
        """

        updated: list[ValidationResult] = []
        with self._lock:
            for result in results:
                active: list[Violation] = []
                hidden: list[Violation] = []
                for violation in result.violations:
                    override = self.get_override(violation, approved_only=True)
                    if override is None:
                        active.append(violation)
                    else:
                        hidden.append(violation.model_copy(update={"suppression": _suppression(override)}))
                updated.append(result.with_violations(active, suppressed=hidden) if hidden else result)
        return updated

    def _mutate(self, change: Callable[[dict[str, Override]], None]) -> None:
        """Apply ``change`` to a copy of the set, persist it, then commit."""

        candidate = dict(self._overrides)
        change(candidate)
        self._write(candidate)
        self._overrides = candidate

    def _read(self) -> dict[str, Override]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise OverrideStoreError(f"{self.path}: {exc}") from exc
        return _parse_payload(payload, source=str(self.path))

    def _write(self, overrides: Mapping[str, Override]) -> None:
        document = {
            "version": OVERRIDE_FILE_VERSION,
            "last_updated": datetime.now(UTC).isoformat(),
            "overrides": [
                override.model_dump(mode="json")
                for override in sorted(overrides.values(), key=lambda item: (item.created_at, item.key))
            ],
        }
        directory = self.path.parent if str(self.path.parent) else Path()
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(document, handle, indent=2, sort_keys=True)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise OverrideStoreError(f"Failed to write overrides to {self.path}: {exc}") from exc


def _suppression(override: Override) -> Suppression:
    return Suppression(
        key=override.key,
        reason=override.reason,
        added_by=override.added_by,
        created_at=override.created_at,
    )


def _coerce_override(record: Override | Mapping[str, Any]) -> Override:
    if isinstance(record, Override):
        return record
    try:
        return Override.model_validate(dict(record))
    except ValidationError as exc:
        raise OverrideStoreError(f"Invalid override record: {exc}") from exc


def _require_criteria(criteria: CriteriaLike) -> OverrideCriteria:
    selection = OverrideCriteria.coerce(criteria)
    if selection.is_empty:
        raise ValueError("override criteria must set at least one of key, rule, file_path or status")
    return selection


def _parse_payload(payload: object, *, source: str) -> dict[str, Override]:
    """Parse an override document in the list form or the legacy keyed-mapping form."""

    if not isinstance(payload, Mapping):
        raise OverrideStoreError(f"{source}: expected a JSON object")
    raw = payload.get("overrides", [])
    entries: Iterable[object]
    if isinstance(raw, Mapping):
        entries = raw.values()
    elif isinstance(raw, list):
        entries = raw
    else:
        raise OverrideStoreError(f"{source}: 'overrides' must be a list or an object")
    parsed: dict[str, Override] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise OverrideStoreError(f"{source}: override entries must be objects")
        try:
            override = Override.model_validate(dict(entry))
        except ValidationError as exc:
            raise OverrideStoreError(f"{source}: invalid override record: {exc}") from exc
        parsed[override.key] = override
    return parsed


__all__ = ["OverrideStore"]
