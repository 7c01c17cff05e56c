"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

REDACTED = "[redacted]"

# Event keys whose values must never reach a log sink
SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "encryption_key",
        "secret",
        "signature",
        "signature_header",
        "token",
        "webhook_secret",
    }
)

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def redact_secrets(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Mask credential-bearing keys before rendering."""
    for key in event_dict.keys() & SENSITIVE_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON output for production, pretty for dev."""

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_secrets,
    ]

    if level.upper() == "DEBUG":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    # Outbound HTTP clients log full URLs and headers at DEBUG
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module."""
    return structlog.get_logger(name)


def bind_delivery(delivery_id: str, event_kind: str) -> None:
    """Attach delivery context to every log line of the current request."""
    structlog.contextvars.bind_contextvars(delivery_id=delivery_id, event_kind=event_kind)


def clear_delivery() -> None:
    structlog.contextvars.unbind_contextvars("delivery_id", "event_kind")
