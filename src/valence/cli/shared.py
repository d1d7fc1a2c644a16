# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, configuration)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import typer

from ..config import Config
from ..config_loader import load_config
from ..errors import ConfigError
from ..logging import Status, status_line
from ..logging import section as print_section

EXIT_OK: Final[int] = 0
EXIT_FAILED: Final[int] = 1
EXIT_SETUP_ERROR: Final[int] = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_SETUP_ERROR) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around the console helpers honouring colour and emoji settings."""

    use_emoji: bool
    use_color: bool

    def fail(self, message: str) -> None:
        """Log a failure message."""

        status_line(Status.FAIL, message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        status_line(Status.WARN, message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message."""

        status_line(Status.OK, message, use_emoji=self.use_emoji, use_color=self.use_color)

    def info(self, message: str) -> None:
        """Log an informational message."""

        status_line(Status.INFO, message, use_emoji=self.use_emoji, use_color=self.use_color)

    def section(self, title: str) -> None:
        """Print a section header."""

        print_section(title, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)


def build_cli_logger(*, emoji: bool, color: bool) -> CLILogger:
    """Return a :class:`CLILogger` for the requested presentation flags."""

    return CLILogger(use_emoji=emoji, use_color=color)


def configure_logging(*, verbose: bool) -> None:
    """Route diagnostic log records to stderr at the requested verbosity."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_cli_config(root: Path, config_file: Path | None = None) -> Config:
    """Load configuration for ``root``, converting failures into :class:`CLIError`."""

    try:
        return load_config(root, config_file=config_file)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc


__all__ = [
    "EXIT_FAILED",
    "EXIT_OK",
    "EXIT_SETUP_ERROR",
    "CLIError",
    "CLILogger",
    "build_cli_logger",
    "configure_logging",
    "load_cli_config",
]
