# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``valence overrides``: manage accepted false positives."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich import box
from rich.table import Table

from ..console import get_console_manager
from ..errors import OverrideStoreError
from ..models import compute_code_hash
from ..overrides import Override, OverrideCriteria, OverrideStatus, OverrideStore
from .shared import EXIT_FAILED, EXIT_SETUP_ERROR, CLIError, CLILogger, build_cli_logger, load_cli_config

overrides_app = typer.Typer(name="overrides", help="Manage false-positive overrides.", no_args_is_help=True)

RootOption = Annotated[Path, typer.Option("--root", help="Project root directory.")]
ConfigOption = Annotated[Path | None, typer.Option("--config", help="Explicit configuration file.")]
StoreOption = Annotated[Path | None, typer.Option("--store", help="Override file; defaults to the configured path.")]
KeyOption = Annotated[str | None, typer.Option("--key", help="Select the override with this key.")]
RuleOption = Annotated[str | None, typer.Option("--rule", help="Select overrides for this rule.")]
FileOption = Annotated[str | None, typer.Option("--file-path", help="Select overrides for this file.")]
StatusOption = Annotated[OverrideStatus | None, typer.Option("--status", help="Select overrides in this status.")]


def _open_store(root: Path, config_file: Path | None, store_path: Path | None) -> OverrideStore:
    project_root = root.resolve()
    try:
        config = load_cli_config(project_root, config_file)
    except CLIError as exc:
        build_cli_logger(emoji=False, color=False).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    path = store_path if store_path is not None else config.overrides.path
    return OverrideStore(path, match_on=config.overrides.match_on)


def _logger() -> CLILogger:
    return build_cli_logger(emoji=True, color=False)


def _criteria(
    key: str | None,
    rule: str | None,
    file_path: str | None,
    status: OverrideStatus | None,
) -> OverrideCriteria:
    criteria = OverrideCriteria(key=key, rule=rule, file_path=file_path, status=status)
    if criteria.is_empty:
        _logger().fail("Select overrides with at least one of --key, --rule, --file-path or --status")
        raise typer.Exit(code=EXIT_SETUP_ERROR)
    return criteria


@overrides_app.command("add")
def add_override(
    rule: Annotated[str, typer.Option("--rule", help="Rule reported by the violation.")],
    file_path: Annotated[str, typer.Option("--file-path", help="File the violation was reported for.")],
    reason: Annotated[str, typer.Option("--reason", help="Why the violation is a false positive.")],
    line: Annotated[int | None, typer.Option("--line", help="Line of the violation.")] = None,
    code: Annotated[str | None, typer.Option("--code", help="Code excerpt; pins the override to it.")] = None,
    added_by: Annotated[str | None, typer.Option("--by", help="Author recorded on the override.")] = None,
    status: Annotated[OverrideStatus, typer.Option("--status", help="Initial review status.")] = OverrideStatus.APPROVED,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Record a false positive."""

    store = _open_store(root, config_file, store_path)
    record = Override(
        rule=rule,
        file_path=file_path,
        reason=reason,
        status=status,
        line=line,
        code_hash=compute_code_hash(code),
        added_by=added_by,
    )
    try:
        stored = store.add_override(record)
    except OverrideStoreError as exc:
        _logger().fail(str(exc))
        raise typer.Exit(code=EXIT_FAILED) from exc
    _logger().ok(f"Override created with key: {stored.key}")


@overrides_app.command("remove")
def remove_override(
    key: KeyOption = None,
    rule: RuleOption = None,
    file_path: FileOption = None,
    status: StatusOption = None,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Remove every override matching the selection."""

    criteria = _criteria(key, rule, file_path, status)
    store = _open_store(root, config_file, store_path)
    try:
        removed = store.remove_override(criteria)
    except OverrideStoreError as exc:
        _logger().fail(str(exc))
        raise typer.Exit(code=EXIT_FAILED) from exc
    if not removed:
        _logger().warn("No overrides matched")
        raise typer.Exit(code=EXIT_FAILED)
    _logger().ok(f"Removed {removed} override(s)")


def _set_status(
    status: OverrideStatus,
    key: str | None,
    rule: str | None,
    file_path: str | None,
    root: Path,
    config_file: Path | None,
    store_path: Path | None,
) -> None:
    criteria = _criteria(key, rule, file_path, None)
    store = _open_store(root, config_file, store_path)
    try:
        changed = store.set_status(criteria, status)
    except OverrideStoreError as exc:
        _logger().fail(str(exc))
        raise typer.Exit(code=EXIT_FAILED) from exc
    _logger().ok(f"Marked {changed} override(s) as {status.value}")


@overrides_app.command("approve")
def approve_override(
    key: KeyOption = None,
    rule: RuleOption = None,
    file_path: FileOption = None,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Approve overrides so they suppress matching violations."""

    _set_status(OverrideStatus.APPROVED, key, rule, file_path, root, config_file, store_path)


@overrides_app.command("reject")
def reject_override(
    key: KeyOption = None,
    rule: RuleOption = None,
    file_path: FileOption = None,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Reject overrides so matching violations are reported again."""

    _set_status(OverrideStatus.REJECTED, key, rule, file_path, root, config_file, store_path)


@overrides_app.command("list")
def list_overrides(
    status: StatusOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print overrides as JSON.")] = False,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """List stored overrides."""

    store = _open_store(root, config_file, store_path)
    overrides = [item for item in store.list_overrides() if status is None or item.status is status]
    if as_json:
        typer.echo(json.dumps([item.model_dump(mode="json") for item in overrides], indent=2))
        return
    table = Table(title="Overrides", box=box.SIMPLE)
    for column in ("Key", "Rule", "File", "Status", "Reason", "Added"):
        table.add_column(column)
    for item in overrides:
        table.add_row(
            item.key,
            item.rule,
            item.file_path if item.line is None else f"{item.file_path}:{item.line}",
            item.status.value,
            item.reason,
            item.created_at.date().isoformat(),
        )
    get_console_manager().get(color=False, emoji=True).print(table)


@overrides_app.command("stats")
def override_stats(
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Summarise stored overrides."""

    stats = _open_store(root, config_file, store_path).get_override_statistics()
    typer.echo(json.dumps(stats.model_dump(mode="json"), indent=2, sort_keys=True))


@overrides_app.command("export")
def export_overrides(
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write to this file instead of stdout.")] = None,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Export overrides for sharing or backup."""

    payload = json.dumps(_open_store(root, config_file, store_path).export_overrides(), indent=2)
    if output is None:
        typer.echo(payload)
        return
    output.write_text(payload + "\n", encoding="utf-8")
    _logger().ok(f"Exported overrides to {output}")


@overrides_app.command("import")
def import_overrides(
    source: Annotated[Path, typer.Argument(help="File produced by 'valence overrides export'.")],
    replace_existing: Annotated[bool, typer.Option("--replace", help="Drop existing overrides first.")] = False,
    root: RootOption = Path(),
    config_file: ConfigOption = None,
    store_path: StoreOption = None,
) -> None:
    """Import overrides exported from another project."""

    store = _open_store(root, config_file, store_path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
        total = store.import_overrides(payload, merge=not replace_existing)
    except (OSError, json.JSONDecodeError, OverrideStoreError) as exc:
        _logger().fail(f"Failed to import overrides from {source}: {exc}")
        raise typer.Exit(code=EXIT_FAILED) from exc
    _logger().ok(f"Store now holds {total} override(s)")


__all__ = ["overrides_app"]
