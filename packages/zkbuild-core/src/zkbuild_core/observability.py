"""Structured logging setup for zkbuild.

Library modules only ever call ``structlog.get_logger(__name__)``; the
application entry point decides where log lines go by calling
configure_logging() once.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    *,
    verbose: bool = False,
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for zkbuild.

    Log lines go to stderr so command output on stdout stays clean.

    Args:
        verbose: If True, log at DEBUG level. Otherwise WARNING and above.
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(verbose=True)
    """
    level = logging.DEBUG if verbose else logging.WARNING

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Stdlib handler shared by structlog and the %-style module loggers
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )
