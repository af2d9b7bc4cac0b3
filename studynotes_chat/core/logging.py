"""
Logging configuration for the chat service.
"""

import logging
import re
import sys

import structlog

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS = {"token", "authorization", "access_token", "jwt"}
_BEARER_PATTERN = re.compile(r"(?i)bearer\s+[A-Za-z0-9\-_=]+\.[A-Za-z0-9\-_=]+\.?[A-Za-z0-9\-_.+/=]*")


def token_scrubbing_processor(logger, method_name, event_dict):
    """
    Structlog processor that keeps credentials out of the logs.

    Drops the value of credential-like keys and masks inline bearer tokens.
    """
    for key, value in list(event_dict.items()):
        if key.lower() in _SENSITIVE_KEYS and value is not None:
            event_dict[key] = REDACTED
        elif isinstance(value, str):
            event_dict[key] = _BEARER_PATTERN.sub(f"Bearer {REDACTED}", value)

    return event_dict


def setup_logging(level: str = "INFO") -> None:
    """
    Setup structured logging with structlog.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stdout,
        format="%(message)s",
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        token_scrubbing_processor,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
