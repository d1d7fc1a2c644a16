# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``valence list``: show the validators and profiles in the catalog."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich import box
from rich.table import Table

from ..catalog import ValidatorLoader
from ..console import get_console_manager
from ..errors import ValenceError
from ..plugins import default_registry
from .shared import CLIError, build_cli_logger, load_cli_config


def list_command(
    root: Annotated[Path, typer.Option("--root", help="Project root directory.")] = Path(),
    catalog: Annotated[
        Path | None,
        typer.Option("--catalog", help="Directory holding validators/ and profiles/."),
    ] = None,
    config_file: Annotated[Path | None, typer.Option("--config", help="Explicit configuration file.")] = None,
) -> None:
    """List available validators, profiles and plugins."""

    logger = build_cli_logger(emoji=True, color=False)
    try:
        config = load_cli_config(root.resolve(), config_file)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    registry = default_registry()
    loader = ValidatorLoader(
        catalog_root=catalog.resolve() if catalog is not None else config.catalog.root,
        registry=registry,
        validators_dir=config.catalog.validators_dir,
        profiles_dir=config.catalog.profiles_dir,
    )

    table = Table(title="Validators", box=box.SIMPLE)
    for column in ("Id", "Name", "Type", "Plugin"):
        table.add_column(column)
    for validator_id in loader.list_validators():
        try:
            definition = loader.load_validator(validator_id)
        except ValenceError as exc:
            table.add_row(validator_id, f"[invalid] {exc}", "-", "-")
            continue
        table.add_row(definition.id, definition.name, definition.type.value, definition.plugin)

    console = get_console_manager().get(color=False, emoji=True)
    console.print(table)
    logger.echo("Profiles:")
    for name in loader.list_profiles():
        logger.echo(f"  {name}")
    logger.echo("Plugins:")
    for plugin in registry.plugins():
        logger.echo(f"  {plugin.plugin_id}: {plugin.description}")


__all__ = ["list_command"]
