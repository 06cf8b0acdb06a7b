"""
Error handling utilities for the QOTD bot.

This module provides utilities for standardized error handling across the bot,
including a decorator for command handlers and the global command error
handler. Messages shown to users are sanitized so database details never leak
into a guild channel.
"""

import functools
import json
import logging
import re
import traceback
import datetime
from typing import Any, Callable, Coroutine, Dict, List, Optional, Pattern, Type, TypeVar

from discord.ext import commands

from utils.exceptions import (
    CapacityExceededError,
    ConfigurationError,
    ConnectionError,
    DatabaseError,
    EmptyPoolError,
    FormatError,
    QotdError,
    QueryError,
    ResourceNotFoundError,
    UserInputError,
    ValidationError,
)

CommandT = TypeVar("CommandT", bound=Callable[..., Coroutine[Any, Any, Any]])

logger = logging.getLogger("error_handling")

GENERIC_FAILURE_MESSAGE = "Something went wrong!"

# Patterns for sensitive information that should be redacted
SENSITIVE_PATTERNS: List[Pattern] = [
    # API keys and tokens
    re.compile(
        r'(api[_-]?key|token|secret|password|auth)[=:]\s*["\'`]?([a-zA-Z0-9_\-\.]{20,})["\'`]?',
        re.IGNORECASE,
    ),
    # Discord tokens
    re.compile(r"[MN][A-Za-z\d]{23}\.[\w-]{6}\.[\w-]{27}"),
    # Database connection strings
    re.compile(r"(postgres(?:ql)?(?:\+asyncpg)?|sqlite(?:\+aiosqlite)?)://[^\s]+", re.IGNORECASE),
    # IP addresses
    re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b"),
]


def detect_sensitive_info(text: str) -> bool:
    """
    Detect if a string contains sensitive information.

    Args:
        text: The text to check

    Returns:
        True if sensitive information is detected, False otherwise
    """
    if not text:
        return False

    return any(pattern.search(text) for pattern in SENSITIVE_PATTERNS)


def redact_sensitive_info(text: str) -> str:
    """
    Redact sensitive information from a string.

    Args:
        text: The text to redact

    Returns:
        The redacted text
    """
    if not text:
        return text

    redacted_text = text
    for pattern in SENSITIVE_PATTERNS:
        if pattern.groups:
            redacted_text = pattern.sub(r"\1: [REDACTED]", redacted_text)
        else:
            redacted_text = pattern.sub("[REDACTED]", redacted_text)

    return redacted_text


# Error response configuration
# Maps exception types to user-facing messages and logging levels.
# A message of None means the error is logged but not answered.
ERROR_RESPONSES: Dict[Type[BaseException], Dict[str, Any]] = {
    # Input validation errors
    FormatError: {
        "message": "{error.message}",
        "log_level": logging.INFO,
    },
    ValidationError: {
        "message": "{error.message}",
        "log_level": logging.INFO,
    },
    CapacityExceededError: {
        "message": "{error.message}",
        "log_level": logging.INFO,
    },
    UserInputError: {
        "message": "Invalid input: {error.message}",
        "log_level": logging.INFO,
    },
    # Resource errors
    ResourceNotFoundError: {
        "message": "{error.message}",
        "log_level": logging.INFO,
    },
    # The curated pool must never be empty; this alerts operators
    EmptyPoolError: {
        "message": GENERIC_FAILURE_MESSAGE,
        "log_level": logging.CRITICAL,
    },
    ConfigurationError: {
        "message": GENERIC_FAILURE_MESSAGE,
        "log_level": logging.ERROR,
    },
    # Database errors
    QueryError: {
        "message": GENERIC_FAILURE_MESSAGE,
        "log_level": logging.ERROR,
    },
    ConnectionError: {
        "message": GENERIC_FAILURE_MESSAGE,
        "log_level": logging.ERROR,
    },
    DatabaseError: {
        "message": GENERIC_FAILURE_MESSAGE,
        "log_level": logging.ERROR,
    },
    # Discord.py built-in errors
    commands.CommandNotFound: {
        "message": None,
        "log_level": logging.DEBUG,
    },
    commands.NoPrivateMessage: {
        "message": "This command can only be used in a server.",
        "log_level": logging.INFO,
    },
    commands.CheckFailure: {
        "message": "You don't have permission to use this command.",
        "log_level": logging.INFO,
    },
    commands.UserInputError: {
        "message": "Invalid argument: {error}",
        "log_level": logging.INFO,
    },
    # Fallback for any QotdError not specifically handled
    QotdError: {
        "message": "Error: {error.message}",
        "log_level": logging.ERROR,
    },
    # Fallback for any Exception not specifically handled
    Exception: {
        "message": GENERIC_FAILURE_MESSAGE,
        "log_level": logging.ERROR,
    },
}


def unwrap_error(error: BaseException) -> BaseException:
    """Return the exception a discord.py ``CommandInvokeError`` wraps."""
    while isinstance(error, commands.CommandInvokeError) and error.original:
        error = error.original
    return error


def get_error_response(error: BaseException) -> Dict[str, Any]:
    """Get the appropriate error response configuration for an exception.

    Args:
        error: The exception to get the response for

    Returns:
        A dictionary with response configuration
    """
    for error_type, response in ERROR_RESPONSES.items():
        if isinstance(error, error_type):
            return response.copy()

    return ERROR_RESPONSES[Exception].copy()


def format_user_message(error: BaseException, response: Dict[str, Any]) -> Optional[str]:
    """Render the user-facing message for ``error``, or None for no reply."""
    template = response.get("message")
    if template is None:
        return None

    try:
        user_message = template.format(error=error)
    except (KeyError, AttributeError, IndexError):
        return GENERIC_FAILURE_MESSAGE

    if detect_sensitive_info(user_message):
        return GENERIC_FAILURE_MESSAGE
    return user_message


def get_detailed_error_context(
    error: BaseException,
    command_name: str,
    user_id: Optional[int],
    guild_id: Optional[int] = None,
    channel_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Get detailed context information for an error for internal logging.

    Args:
        error: The exception that occurred
        command_name: Name of the command that caused the error
        user_id: ID of the user who triggered the error
        guild_id: Optional guild ID where the error occurred
        channel_id: Optional channel ID where the error occurred

    Returns:
        A dictionary with detailed error context
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": redact_sensitive_info(getattr(error, "message", str(error))),
        "command_name": command_name,
        "user_id": user_id,
        "guild_id": guild_id,
        "channel_id": channel_id,
        "timestamp": datetime.datetime.now().isoformat(),
        "traceback": None,
    }

    if not isinstance(error, QotdError) or error.__cause__ is not None:
        context["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return context


def log_error(
    error: BaseException,
    command_name: str,
    user_id: Optional[int],
    log_level: int = logging.ERROR,
    guild_id: Optional[int] = None,
    channel_id: Optional[int] = None,
) -> None:
    """Log an error with standardized format.

    Args:
        error: The exception to log
        command_name: Name of the command that caused the error
        user_id: ID of the user who triggered the error
        log_level: Logging level to use
        guild_id: Optional guild ID where the error occurred
        channel_id: Optional channel ID where the error occurred
    """
    error_type = type(error).__name__
    error_message = redact_sensitive_info(getattr(error, "message", str(error)))

    logger.log(
        log_level,
        f"{error_type} in {command_name}: {error_message} | User: {user_id} | Guild: {guild_id}",
    )

    # For errors at WARNING level or higher, log detailed context
    if log_level >= logging.WARNING:
        context = get_detailed_error_context(
            error=error,
            command_name=command_name,
            user_id=user_id,
            guild_id=guild_id,
            channel_id=channel_id,
        )
        logger.log(log_level, f"Detailed error context: {json.dumps(context, default=str)}")


async def respond_to_error(ctx: commands.Context, error: BaseException) -> None:
    """Reply to the invoker and log ``error`` according to ``ERROR_RESPONSES``."""
    error = unwrap_error(error)
    response = get_error_response(error)
    user_message = format_user_message(error, response)

    if user_message is not None:
        try:
            await ctx.reply(user_message)
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")

    log_error(
        error=error,
        command_name=ctx.command.name if ctx.command else "unknown",
        user_id=ctx.author.id if ctx.author else None,
        log_level=response.get("log_level", logging.ERROR),
        guild_id=ctx.guild.id if ctx.guild else None,
        channel_id=ctx.channel.id if ctx.channel else None,
    )


def handle_command_errors(func: CommandT) -> CommandT:
    """Decorator for command handlers to standardize error handling.

    This decorator catches exceptions raised by command handlers and provides
    appropriate user feedback based on the exception type.

    Args:
        func: The command handler function to decorate

    Returns:
        The decorated function
    """

    @functools.wraps(func)
    async def wrapper(self, ctx, *args, **kwargs):
        try:
            return await func(self, ctx, *args, **kwargs)
        except Exception as error:
            await respond_to_error(ctx, error)

    return wrapper


async def handle_global_command_error(ctx: commands.Context, error: Exception) -> None:
    """Global error handler for command errors.

    Handles errors raised before a command body runs (checks, unknown
    commands) and anything a command handler let through.

    Args:
        ctx: The command context
        error: The error that occurred
    """
    if ctx.command is not None and ctx.command.has_error_handler():
        return
    await respond_to_error(ctx, error)
