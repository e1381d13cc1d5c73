# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging configuration using structlog.

Domain modules log through the standard library
(``logging.getLogger(__name__)``). setup_logging() installs a root handler
whose structlog ProcessorFormatter renders those records the same way as
structlog's own loggers: JSON outside development, colored console output
in development. Values bound with bind_context() (the middleware binds
``user_id``) are merged into every record logged in the same context.

Example:
    >>> from localeve.utils.logging import setup_logging, get_logger, bind_context
    >>> from localeve.core.config import get_settings
    >>> setup_logging(get_settings())
    >>> bind_context(user_id="u1")
    >>> logging.getLogger("localeve.domains.auth.service").info("Tokens issued")
    >>> get_logger(__name__).info("event created", event_id="e1")
"""

import logging
import sys
from typing import TYPE_CHECKING, Optional

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from localeve.core.config.settings import Settings

# Root handler installed by setup_logging(); replaced on reconfiguration.
_handler: Optional[logging.Handler] = None


def setup_logging(settings: "Settings") -> None:
    """Configure structured logging for the application.

    Args:
        settings: Application settings containing log_level and debug flag.
    """
    global _handler

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Applied to structlog events and to foreign (stdlib) records alike.
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_development or settings.debug:
        renderer_chain: list[Processor] = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        renderer_chain = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=renderer_chain,
        )
    )

    root_logger = logging.getLogger()
    if _handler is not None:
        root_logger.removeHandler(_handler)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)
    _handler = handler

    # Set third-party loggers to WARNING to reduce noise
    for logger_name in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "httpcore",
        "redis",
        "asyncio",
    ]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("localeve").setLevel(log_level)


def get_handler() -> Optional[logging.Handler]:
    """Get the root handler installed by setup_logging(), if any."""
    return _handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log calls in this context.

    Useful for adding request-scoped information like request_id or user_id.

    Args:
        **kwargs: Key-value pairs to bind to the logging context.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables.

    Should be called at the end of request processing to prevent
    context leakage between requests.
    """
    structlog.contextvars.clear_contextvars()
