"""Structured logging for curation runs.

Events carry the run and category of the pass that emitted them. Passes
gathered concurrently each run in their own task context, so
``pass_context`` keeps their identifiers apart.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog

from curator.settings.app import AppSettings


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for the curator.

    Args:
        level: Minimum level that is emitted.
        output: Stream receiving rendered events.
        json_format: Render JSON lines instead of the console format.
    """
    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        # Tests reconfigure between cases; cached loggers would keep the old stream.
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)


def configure_from_settings(
    settings: AppSettings,
    verbose: bool = False,
    json_logs: bool | None = None,
    output: TextIO = sys.stderr,
) -> int:
    """Configure logging from environment settings and CLI overrides.

    Args:
        settings: Process settings (``CURATOR_LOG_LEVEL``, ``CURATOR_JSON_LOGS``).
        verbose: Force DEBUG regardless of the configured level.
        json_logs: Override the configured output format when not None.
        output: Stream receiving rendered events.

    Returns:
        The level that was applied.
    """
    level = logging.DEBUG if verbose else settings.log_level_number()
    configure_logging(
        level=level,
        output=output,
        json_format=settings.json_logs if json_logs is None else json_logs,
    )
    return level


def bind_pass_context(run_id: str, category: str | None = None) -> None:
    """Attach run and category identifiers to every subsequent event."""
    context: dict[str, str] = {"run_id": run_id}
    if category is not None:
        context["category"] = category
    structlog.contextvars.bind_contextvars(**context)


def clear_pass_context() -> None:
    """Remove run and category identifiers from the logging context."""
    structlog.contextvars.unbind_contextvars("run_id", "category")


@contextmanager
def pass_context(run_id: str, category: str) -> Iterator[None]:
    """Scope run and category identifiers to one category pass.

    Identifiers bound by an enclosing scope are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(run_id=run_id, category=category):
        yield
