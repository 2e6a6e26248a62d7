"""
Logging configuration module for the order management service.

Configures structlog on top of the standard library so that both
``structlog.get_logger`` and plain ``logging`` loggers (uvicorn, httpx)
share one output format. Request IDs are carried through structlog
contextvars and appear on every log line emitted while handling a request.
"""

import logging
import sys
from typing import Optional
from uuid import uuid4

import structlog

_configured = False


def setup_logging(log_level: str = "INFO", use_json: bool = True) -> None:
    """
    Configure application logging.

    Safe to call more than once; only the first call installs handlers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: Render JSON lines instead of the coloured console format
    """
    global _configured
    if _configured:
        return

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _configured = True


def bind_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request ID to the logging context.

    Args:
        request_id: Request ID to bind, generates a new UUID if None

    Returns:
        The request ID that was bound
    """
    if not request_id:
        request_id = str(uuid4())
    structlog.contextvars.bind_contextvars(request_id=request_id)
    return request_id


def clear_request_context() -> None:
    """Clear per-request logging context."""
    structlog.contextvars.clear_contextvars()
