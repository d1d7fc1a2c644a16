# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .catalog import list_command
from .overrides import overrides_app
from .run import run_command

app = typer.Typer(name="valence", help="Pluggable architecture-compliance validation.", no_args_is_help=True)
app.command("run")(run_command)
app.command("list")(list_command)
app.add_typer(overrides_app, name="overrides")


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
