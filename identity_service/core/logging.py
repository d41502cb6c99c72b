# identity_service/core/logging.py
"""
Logging setup.

Modules log through the standard library (`logging.getLogger(__name__)`).
`configure_logging` installs one root handler whose formatter is structlog's
ProcessorFormatter, so LOG_FORMAT=json produces JSON lines and
LOG_FORMAT=text a readable console format.
"""

import logging

import structlog

from identity_service.core.config import settings

_configured = False


def redact_email(email: str) -> str:
    """Keep the domain and the first two characters of the local part."""
    if not email or "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def configure_logging(log_level: str = settings.LOG_LEVEL, log_format: str = settings.LOG_FORMAT) -> None:
    """
    Route stdlib log records through structlog renderers.

    Args:
        log_level: DEBUG | INFO | WARNING | ERROR
        log_format: json | text
    """
    global _configured
    if _configured:
        return

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format.lower() == "json":
        final_processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=final_processors,
        )
    )

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    _configured = True
