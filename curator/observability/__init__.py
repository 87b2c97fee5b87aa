"""Observability module for structured logging."""

from curator.observability.logging import (
    bind_pass_context,
    clear_pass_context,
    configure_from_settings,
    configure_logging,
    pass_context,
)


__all__ = [
    "bind_pass_context",
    "clear_pass_context",
    "configure_from_settings",
    "configure_logging",
    "pass_context",
]
