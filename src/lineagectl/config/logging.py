"""structlog setup for lineagectl.

Everything goes to stderr so stdout carries only command results.
Events from the ``lineagectl`` logger tree follow ``--verbose``; other
libraries (networkx, pydantic) stay at WARNING either way.

A :class:`LineageError` passed as ``error=`` is flattened into
``error_kind``, ``error`` (its message) and its detail fields, so JSON
logs can be filtered by kind without parsing messages.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from lineagectl.domain.errors import LineageError

LOGGER_NAME = "lineagectl"


def flatten_lineage_error(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Expand ``error=<LineageError>`` into plain, serializable fields."""
    error = event_dict.get("error")
    if isinstance(error, LineageError):
        event_dict["error"] = error.message
        event_dict["error_kind"] = str(error.kind)
        for key, value in error.detail.items():
            event_dict.setdefault(key, value)
    return event_dict


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Safe to call repeatedly: the root handler is replaced, not stacked.

    Args:
        verbose: DEBUG for the ``lineagectl`` loggers instead of WARNING.
        log_json: One JSON object per line instead of console output.
    """
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        flatten_lineage_error,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
