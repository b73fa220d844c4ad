"""Structured logging configuration.

Purpose: JSON-formatted logs for the client core, one event per line.

Pattern: structlog with standard library integration. Every event carries
service="patient-portal-client"; events emitted while a backend call is
in flight also carry its request_id (bound through contextvars, which
asyncio.to_thread copies into the worker thread).
"""
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import IO, Iterator, Optional

import structlog

SERVICE_NAME = "patient-portal-client"


def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_structured_logging(log_level: str = "INFO", stream: Optional[IO[str]] = None):
    """
    Configure structured logging for the client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        stream: Log destination (default: stdout). The terminal client
                passes stderr so logs stay out of its prompts.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get logger instance with structured logging.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate unique request ID for the X-Request-ID header."""
    return f"req-{uuid.uuid4().hex[:12]}"


@contextmanager
def request_context(request_id: str, method: str, path: str) -> Iterator[None]:
    """Bind request_id/method/path to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(
        request_id=request_id, method=method, path=path
    ):
        yield
