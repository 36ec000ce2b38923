"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

HANDLER_NAME = "featuretoggle"


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structured logging for the registry and the CLI.

    Rendered lines are handed to stdlib logging and written to stderr so
    that command output on stdout stays parseable. Calling this again
    replaces the previous handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, render log lines as JSON objects.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(log_level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger backed by the stdlib logger ``name``.

    Until the host configures logging, events go through stdlib logging's
    defaults, so debug and info lines from the registry are dropped.
    """
    return structlog.wrap_logger(logging.getLogger(name))


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind key-value pairs to every log line emitted inside the block.

    Example:
        with log_context(project="checkout"):
            registry.is_active("beta")
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
