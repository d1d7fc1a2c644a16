# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``valence run``: execute validators and report the outcome."""

from __future__ import annotations

import json
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from ..catalog import ValidatorLoader
from ..config import Config
from ..discovery import DEFAULT_PATTERN, collect_files
from ..errors import ReportGenerationError, ValenceError
from ..models import Report, ValidatorDefinition
from ..overrides import OverrideStore
from ..pipeline import RunRequest, ValidationPipeline
from ..plugins import default_registry
from ..reporting import generate_reports, render_console, report_payload
from .shared import (
    EXIT_FAILED,
    EXIT_OK,
    EXIT_SETUP_ERROR,
    CLIError,
    CLILogger,
    build_cli_logger,
    configure_logging,
    load_cli_config,
)


class OutputFormat(str, Enum):
    """Console output formats supported by ``valence run``."""

    TABLE = "table"
    JSON = "json"


def run_command(
    profile: Annotated[str | None, typer.Option("--profile", "-p", help="Run validators from a profile.")] = None,
    validator: Annotated[str | None, typer.Option("--validator", "-v", help="Run a single validator.")] = None,
    validators: Annotated[
        list[str] | None,
        typer.Option("--validators", help="Run specific validators (repeatable)."),
    ] = None,
    files: Annotated[
        list[str] | None,
        typer.Option("--files", "-f", help="Glob pattern selecting files, relative to the root (repeatable)."),
    ] = None,
    root: Annotated[Path, typer.Option("--root", help="Project root directory.")] = Path(),
    catalog: Annotated[
        Path | None,
        typer.Option("--catalog", help="Directory holding validators/ and profiles/."),
    ] = None,
    config_file: Annotated[Path | None, typer.Option("--config", help="Explicit configuration file.")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", "-d", help="Show what would run without running.")] = False,
    output_format: Annotated[OutputFormat, typer.Option("--format", help="Console output format.")] = OutputFormat.TABLE,
    generate: Annotated[
        bool,
        typer.Option("--generate-reports", help="Write report artifacts to the report directory."),
    ] = False,
    report_dir: Annotated[Path | None, typer.Option("--report-dir", help="Report directory.")] = None,
    confidence_threshold: Annotated[
        float | None,
        typer.Option("--confidence-threshold", min=0.0, max=1.0, help="Drop violations below this confidence."),
    ] = None,
    apply_overrides: Annotated[
        bool | None,
        typer.Option("--apply-overrides/--no-apply-overrides", help="Suppress approved false positives."),
    ] = None,
    show_overrides: Annotated[bool, typer.Option("--show-overrides", help="Print override statistics.")] = False,
    jobs: Annotated[int | None, typer.Option("--jobs", "-j", min=1, help="Validators run concurrently.")] = None,
    color: Annotated[bool | None, typer.Option("--color/--no-color", help="Colourise console output.")] = None,
    emoji: Annotated[bool | None, typer.Option("--emoji/--no-emoji", help="Use emoji markers.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Run validators against the selected files."""

    configure_logging(verbose=verbose)
    project_root = root.resolve()
    try:
        config = load_cli_config(project_root, config_file)
    except CLIError as exc:
        build_cli_logger(emoji=bool(emoji), color=bool(color)).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    logger = build_cli_logger(
        emoji=config.output.emoji if emoji is None else emoji,
        color=config.output.color if color is None else color,
    )
    quiet = output_format is OutputFormat.JSON
    threshold = confidence_threshold if confidence_threshold is not None else config.filtering.confidence_threshold
    use_overrides = config.filtering.apply_overrides if apply_overrides is None else apply_overrides

    try:
        request = RunRequest(
            files=(),
            profile=profile,
            validator=validator,
            validators=tuple(validators or ()),
            confidence_threshold=threshold,
            apply_overrides=use_overrides,
        )
    except ValueError as exc:
        logger.fail("Please specify exactly one of --profile, --validator or --validators")
        raise typer.Exit(code=EXIT_SETUP_ERROR) from exc

    registry = default_registry()
    loader = ValidatorLoader(
        catalog_root=catalog.resolve() if catalog is not None else config.catalog.root,
        registry=registry,
        validators_dir=config.catalog.validators_dir,
        profiles_dir=config.catalog.profiles_dir,
    )
    store = OverrideStore(config.overrides.path, match_on=config.overrides.match_on)
    pipeline = ValidationPipeline(
        loader=loader,
        registry=registry,
        override_store=store,
        jobs=jobs or config.execution.jobs,
        root=project_root,
    )

    try:
        definitions = pipeline.resolve(request)
    except ValenceError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_SETUP_ERROR) from exc

    patterns = files or [DEFAULT_PATTERN]
    candidates = collect_files(patterns, project_root, excludes=config.execution.excludes)
    if not quiet:
        logger.info(f"Loaded {len(definitions)} validator(s); {len(candidates)} file(s) match {', '.join(patterns)}")

    if dry_run:
        _emit_dry_run(logger, definitions, candidates, config, threshold=threshold, use_overrides=use_overrides)
        raise typer.Exit(code=EXIT_OK)

    report = pipeline.execute(replace(request, files=tuple(candidates)), definitions)

    if quiet:
        typer.echo(json.dumps(report_payload(report), indent=2))
    else:
        render_console(
            report,
            color=logger.use_color,
            emoji=logger.use_emoji,
            show_suppressed=show_overrides,
            low_confidence_threshold=config.output.low_confidence_threshold,
        )
    if show_overrides and not quiet:
        _emit_override_stats(logger, store)

    if generate:
        target = report_dir.resolve() if report_dir is not None else config.output.report_dir
        try:
            written = generate_reports(
                report,
                target,
                formats=config.output.formats,
                low_confidence_threshold=config.output.low_confidence_threshold,
            )
        except ReportGenerationError as exc:
            logger.fail(str(exc))
            raise typer.Exit(code=EXIT_SETUP_ERROR) from exc
        if not quiet:
            for fmt, path in written.items():
                logger.ok(f"Wrote {fmt} report to {path}")

    raise typer.Exit(code=_exit_code(report))


def _exit_code(report: Report) -> int:
    return EXIT_OK if report.succeeded else EXIT_FAILED


def _emit_dry_run(
    logger: CLILogger,
    definitions: list[ValidatorDefinition],
    candidates: list[str],
    config: Config,
    *,
    threshold: float | None,
    use_overrides: bool,
) -> None:
    logger.section("Dry run")
    logger.echo("Validators to run:")
    for index, definition in enumerate(definitions, start=1):
        logger.echo(f"  {index}. {definition.name} [{definition.id}] ({definition.type.value}, plugin={definition.plugin})")
    logger.echo(f"Files to validate: {len(candidates)}")
    logger.echo(f"Confidence threshold: {'disabled' if threshold is None else threshold}")
    logger.echo(f"Apply overrides: {use_overrides}")
    logger.echo(f"Report directory: {config.output.report_dir}")


def _emit_override_stats(logger: CLILogger, store: OverrideStore) -> None:
    stats = store.get_override_statistics()
    logger.section("Overrides")
    logger.echo(f"Total: {stats.total}")
    logger.echo(f"Added in the last 7 days: {stats.recent}")
    for rule, count in sorted(stats.by_rule.items()):
        logger.echo(f"  {rule}: {count}")


__all__ = ["OutputFormat", "run_command"]
