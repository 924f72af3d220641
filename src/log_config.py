"""Structured logging setup for the dependency engine.

Engine modules log through ``structlog.get_logger(__name__)`` with
snake_case event names and key/value context. This module decides where
those events go: structlog renders them (JSON or console text) and hands
them to the standard library root logger, which writes to stderr. Command
output on stdout is never mixed with log lines.

Example:
    >>> from src.log_config import configure_logging, logging_context
    >>> configure_logging(level="INFO")
    >>> with logging_context(snapshot="brand.yaml", command="validate"):
    ...     logger.info("graph_validated", error_count=0)
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Route structlog events through stdlib logging at ``level``.

    Safe to call more than once; the CLI calls it with the command-line level
    before reading the config file and again with the configured level.

    Args:
        level: Logging level name, case-insensitive (DEBUG .. CRITICAL)
        json_logs: Render events as JSON lines; console text otherwise

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    renderer: Any
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ],
            ),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # loggers are created at import time, before configure_logging runs
        cache_logger_on_first_use=False,
    )


def bind_context(**kwargs: Any) -> None:
    """Attach key/value pairs to every event logged in the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Drop previously bound keys from the current context."""
    structlog.contextvars.unbind_contextvars(*keys)


@contextmanager
def logging_context(**kwargs: Any) -> Iterator[None]:
    """Bind ``kwargs`` for the duration of a block, then unbind them.

    Args:
        **kwargs: Context such as the snapshot path or the command being run

    Yields:
        None
    """
    bind_context(**kwargs)
    try:
        yield
    finally:
        unbind_context(*kwargs)
