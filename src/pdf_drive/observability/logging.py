"""structlog setup for PDF Drive.

All records, structlog events and stdlib records from uvicorn or httpx
alike, leave through one stdout handler on the root logger. Request-scoped
fields such as ``request_id`` live in ``structlog.contextvars`` and are
bound by ``ObservabilityMiddleware``.

Usage::

    from pdf_drive.observability.logging import get_logger

    logger = get_logger(__name__)
    logger.info("grant_created", document_id=doc.id, grantee_id=user.id)
"""

from __future__ import annotations

import logging
import sys

import structlog

_HANDLER_NAME = "pdf_drive"

_PRE_CHAIN: list = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def configure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Install the PDF Drive handler on the root logger.

    Calling it again (one call per ``create_app``) swaps the handler it
    installed earlier and leaves any other root handlers in place.

    Args:
        level: Root log level name, as in ``LOG_LEVEL``.
        log_format: ``json`` for JSON lines, anything else for console output.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    ))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # request_completed replaces uvicorn's access line.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
