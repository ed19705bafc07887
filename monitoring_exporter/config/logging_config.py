"""
Structured logging configuration using structlog with JSON output.
"""
import logging
import sys
from typing import Any, Dict, Optional

import structlog

from monitoring_exporter.config.settings import LoggingSettings, settings

SENSITIVE_KEYS = ["password", "token", "secret", "api_key", "auth", "credential"]
REDACTED = "***REDACTED***"


def filter_sensitive_data(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Filter sensitive data from logs (passwords, tokens, etc.)"""
    return {
        k: REDACTED if any(sensitive in k.lower() for sensitive in SENSITIVE_KEYS) else v
        for k, v in event_dict.items()
    }


def configure_logging(logging_settings: Optional[LoggingSettings] = None) -> None:
    """Configure structlog for JSON logging with request correlation IDs"""
    logging_settings = logging_settings or settings.logging

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        filter_sensitive_data,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if logging_settings.format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    # Replace rather than append so repeated app construction does not duplicate output
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, logging_settings.level.upper(), logging.INFO))


def get_logger(name: str) -> Any:
    """Get a structured logger instance"""
    return structlog.get_logger(name)
