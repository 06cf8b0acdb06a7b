"""
Structured logging configuration for the bot.

This module sets up structured logging using the structlog library on top of
the standard logging handlers, and provides a request context so every log
line emitted while a command runs carries the same request id.
"""

import contextvars
import logging
import logging.handlers
import os
import sys
import uuid
from typing import Optional

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars
from structlog.stdlib import LoggerFactory

from config import BotConfig, LogFormat

# Create a context variable to store the request ID
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def get_request_id() -> Optional[str]:
    """Get the current request ID, or None outside a request."""
    return request_id_var.get()


# Configure standard logging
def configure_stdlib_logging(
    log_level: int = logging.INFO, log_file: Optional[str] = None
) -> None:
    """Configure standard logging.

    Args:
        log_level: The logging level to use.
        log_file: Optional log file name, written under ``logs/``.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        os.makedirs("logs", exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=os.path.join("logs", f"{log_file}.log"),
            encoding="utf-8",
            maxBytes=32 * 1024 * 1024,  # 32 MB
            backupCount=10,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        format="%(message)s", level=log_level, handlers=handlers, force=True
    )
    logging.getLogger("discord").setLevel(log_level)


# Configure structlog
def configure_structlog(log_format: LogFormat = LogFormat.CONSOLE) -> None:
    """Configure structlog with processors for formatting and output.

    Args:
        log_format: Either JSON for machine readability or console output.
    """
    processors = [
        # Add context variables (including request_id)
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if log_format == LogFormat.JSON:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def init_logging(config: BotConfig) -> structlog.stdlib.BoundLogger:
    """Initialize logging with both stdlib and structlog.

    Args:
        config: The bot configuration to take level, file and format from.

    Returns:
        A structlog logger instance.
    """
    configure_stdlib_logging(config.logging_level, config.logfile)
    configure_structlog(config.log_format)
    return structlog.get_logger()


class RequestContext:
    """Context manager for tracking a command invocation with a unique ID.

    The request id, and any extra fields given, are bound into structlog's
    context variables for the duration of the block.

    Example:
        ```python
        async with RequestContext(logger, "qotd", guild_id="123"):
            logger.info("delivering")
        ```
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation_name: str,
        request_id: Optional[str] = None,
        **context: object,
    ):
        self.logger = logger
        self.operation_name = operation_name
        self.request_id = request_id or generate_request_id()
        self.context = context
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "RequestContext":
        self._token = request_id_var.set(self.request_id)
        bind_contextvars(request_id=self.request_id, **self.context)
        self.logger.debug(f"{self.operation_name}_started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.logger.debug(f"{self.operation_name}_completed")
        else:
            self.logger.error(
                f"{self.operation_name}_failed",
                error=str(exc_val),
                error_type=exc_type.__name__,
            )
        unbind_contextvars("request_id", *self.context)
        if self._token is not None:
            request_id_var.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "RequestContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
