"""Structured logging for scoutnotes.

Usage:
    from scoutnotes.logging import configure_logging, get_logger

    configure_logging()  # once, at startup
    logger = get_logger(__name__)
    logger.info("team_lock_acquired", team_id=42, token_prefix="3f9a")

Level and format come from Settings (LOG_LEVEL, LOG_FORMAT, ENVIRONMENT).
"""

import logging
import sys
from typing import Any

import structlog

from scoutnotes.config import Settings, get_settings

# Lock tokens prove the right to commit; only this many characters reach the logs.
TOKEN_LOG_PREFIX = 6


def token_prefix(token: str | None) -> str | None:
    """Shorten a lock token for logging."""
    if token is None:
        return None
    return token[:TOKEN_LOG_PREFIX]


def _environment_processor(environment: str) -> structlog.typing.Processor:
    def add_environment(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["environment"] = environment
        return event_dict

    return add_environment


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the standard library root logger."""
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _environment_processor(settings.environment.value),
    ]

    if settings.effective_log_format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so CLI output on stdout stays machine-readable
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("supabase").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, typically with __name__ of the calling module."""
    return structlog.get_logger(name)

