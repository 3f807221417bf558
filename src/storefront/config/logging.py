"""
Structured logging for the storefront CLI.

Events go to stderr so command output on stdout (tables, ``--json``
bodies) stays machine-readable.  Use cases bind the order they work on
with ``order_context()``; every event logged underneath, the inventory
services' included, then carries it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

import structlog
from structlog.types import Processor

from storefront.config.settings import Settings, get_settings


def enum_values(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render statuses and movement types by their stored value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


@contextmanager
def order_context(**order: Any) -> Iterator[None]:
    """Bind ``order_id`` / ``order_number`` to every event in the block."""
    with structlog.contextvars.bound_contextvars(
        **{key: value for key, value in order.items() if value is not None}
    ):
        yield


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog once per CLI invocation."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        enum_values,
    ]

    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )
    # filelock reports every acquire/release at debug
    logging.getLogger("filelock").setLevel(logging.WARNING)
