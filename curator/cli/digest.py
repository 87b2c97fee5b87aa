"""CLI commands for the digest curator."""

import asyncio
import json
import logging
import sys
import uuid
from datetime import UTC, datetime
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from curator import __version__
from curator.config.constants import COMPONENT_CLI
from curator.config.error_hints import format_validation_error
from curator.config.errors import ConfigurationError
from curator.config.loader import CurationConfigLoader
from curator.config.schemas.categories import CurationConfig
from curator.focus.profile import build_focus_profile
from curator.observability.logging import (
    bind_pass_context,
    configure_from_settings,
    configure_logging,
)
from curator.pipeline.digest import DigestPipeline
from curator.settings.app import get_settings
from curator.store.json_store import JsonItemStore


logger = structlog.get_logger()


def _echo_configuration_errors(error: ConfigurationError) -> None:
    """Print a configuration error with per-field hints."""
    click.echo(f"Configuration error: {error}", err=True)
    for detail in error.errors:
        formatted = format_validation_error(
            location=detail["loc"],
            message=detail["msg"],
            error_type=detail.get("type", "unknown"),
            include_hint=True,
        )
        click.echo(f"  - {formatted}", err=True)


def _load_config_or_exit(config_path: Path | None, run_id: str) -> CurationConfig:
    """Load the configuration, exiting with status 1 on failure."""
    loader = CurationConfigLoader(run_id=run_id)
    try:
        return loader.load(config_path)
    except ConfigurationError as e:
        _echo_configuration_errors(e)
        sys.exit(1)


def _parse_now(value: str | None) -> datetime | None:
    """Parse an ISO-8601 reference time; naive values are UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        msg = f"'{value}' is not an ISO-8601 timestamp"
        raise click.BadParameter(msg, param_hint="--now") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Digest curator CLI."""


@cli.command()
@click.option(
    "--candidates",
    "candidates_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON list of candidate items.",
)
@click.option(
    "--judgments",
    "judgments_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON object mapping item id to model judgment.",
)
@click.option("--category", required=True, help="Category to rank.")
@click.option(
    "--period",
    default=None,
    help="Digest period (day, week, month, all). Defaults to CURATOR_DEFAULT_PERIOD.",
)
@click.option("--prompt", default=None, help="Free-text focus prompt.")
@click.option(
    "--max-items",
    type=click.IntRange(min=1),
    default=None,
    help="Override the category's maximum item count.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Categories YAML file (default: built-in categories).",
)
@click.option(
    "--now",
    "now_value",
    default=None,
    help="Reference time as ISO-8601 (default: current time).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: CURATOR_JSON_LOGS).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def rank(  # noqa: PLR0913
    candidates_path: Path,
    judgments_path: Path | None,
    category: str,
    period: str | None,
    prompt: str | None,
    max_items: int | None,
    config_path: Path | None,
    now_value: str | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Rank and select a digest shortlist for one category.

    Prints the selection, reasons and pass metrics as JSON.
    """
    settings = get_settings()
    run_id = str(uuid.uuid4())
    configure_from_settings(settings, verbose=verbose, json_logs=json_logs)
    bind_pass_context(run_id, category)
    log = logger.bind(component=COMPONENT_CLI, command="rank", run_id=run_id)

    now = _parse_now(now_value)
    config = _load_config_or_exit(config_path or settings.config_path, run_id)

    try:
        store = JsonItemStore.from_files(candidates_path, judgments_path, now=now)
    except ValidationError as e:
        log.warning("input_validation_failed", error_count=e.error_count())
        click.echo(f"Invalid input data: {e}", err=True)
        sys.exit(1)

    focus = build_focus_profile(prompt)
    pipeline = DigestPipeline(store, store, config=config, run_id=run_id)

    try:
        result = asyncio.run(
            pipeline.run(
                category,
                period=period or settings.default_period,
                focus=focus,
                max_items=max_items,
                now=now,
                window_days=settings.window_days,
            )
        )
    except ConfigurationError as e:
        log.warning("rank_config_failed", error=str(e))
        _echo_configuration_errors(e)
        sys.exit(1)

    output = result.to_dict()
    output["focus"] = focus.model_dump() if focus is not None else None
    click.echo(json.dumps(output, indent=2))


@cli.command()
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Categories YAML file to validate.",
)
def validate(config_path: Path) -> None:
    """Validate a categories file without ranking anything."""
    run_id = str(uuid.uuid4())
    configure_logging(json_format=False)
    bind_pass_context(run_id)

    config = _load_config_or_exit(config_path, run_id)

    click.echo("Configuration is valid!")
    click.echo(f"  Categories: {len(config.categories)}")
    click.echo(f"  Periods: {len(config.periods)}")
    click.echo(f"  Checksum: {config.compute_checksum()}")


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Categories YAML file (default: built-in categories).",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def categories(config_path: Path | None, json_output: bool) -> None:
    """List configured categories."""
    run_id = str(uuid.uuid4())
    configure_logging(level=logging.WARNING, json_format=False)

    config = _load_config_or_exit(config_path or get_settings().config_path, run_id)

    if json_output:
        output = {
            name: profile.model_dump(mode="json")
            for name, profile in sorted(config.categories.items())
        }
        click.echo(json.dumps(output, indent=2))
        return

    for name, profile in sorted(config.categories.items()):
        click.echo(
            f"{name}: max_items={profile.max_items} "
            f"min_relevance={profile.min_relevance} "
            f"half_life_days={profile.half_life_days:g}"
        )
        if profile.description:
            click.echo(f"  {profile.description}")
