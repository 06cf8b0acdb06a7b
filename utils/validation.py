"""
Input validation utilities for the QOTD bot.

This module turns raw command arguments into the values the repositories
accept. Every parser raises ``ValidationError`` (or ``FormatError``) before
anything is written, carrying the message that is shown to the user.
"""

import logging
import re
from typing import Any, Optional, Pattern

from models.domain import ContentId, MentionPolicy, PollItem
from utils.exceptions import FormatError, ValidationError

logger = logging.getLogger("validation")

CHANNEL_MENTION_PATTERN: Pattern = re.compile(r"^<#([0-9]+)>$")
ROLE_MENTION_PATTERN: Pattern = re.compile(r"^<@&([0-9]+)>$")
SNOWFLAKE_PATTERN: Pattern = re.compile(r"[0-9]+")
INTEGER_PATTERN: Pattern = re.compile(r"[+-]?[0-9]+")

POLL_FORMAT = "submit_poll Question\nOption1\nOption2"


# Basic validation functions


def validate_string(
    value: Any,
    min_length: int = 0,
    max_length: Optional[int] = None,
    strip: bool = True,
    allow_empty: bool = False,
    error_message: Optional[str] = None,
) -> str:
    """
    Validate a string value.

    Args:
        value: The value to validate
        min_length: Minimum length of the string
        max_length: Maximum length of the string
        strip: Whether to strip whitespace from the string
        allow_empty: Whether to allow empty strings
        error_message: Custom error message to use if validation fails

    Returns:
        The validated string

    Raises:
        ValidationError: If the value is not a valid string
    """
    if value is None:
        if not allow_empty:
            raise ValidationError(message=error_message or "Value cannot be None")
        return ""

    if not isinstance(value, str):
        raise ValidationError(
            message=error_message or f"Expected string, got {type(value).__name__}"
        )

    if strip:
        value = value.strip()

    if not allow_empty and not value:
        raise ValidationError(message=error_message or "Value cannot be empty")

    if min_length > 0 and len(value) < min_length:
        raise ValidationError(
            message=error_message or f"Value must be at least {min_length} characters long"
        )

    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            message=error_message or f"Value cannot be longer than {max_length} characters"
        )

    return value


def validate_integer(
    value: Any,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
    error_message: Optional[str] = None,
) -> int:
    """
    Validate an integer value.

    Args:
        value: The value to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        error_message: Custom error message to use if validation fails

    Returns:
        The validated integer

    Raises:
        ValidationError: If the value is not a valid integer
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(message=error_message or "Expected an integer")

    try:
        if isinstance(value, str):
            value = value.strip()
            # ASCII digits only, no underscores
            if not INTEGER_PATTERN.fullmatch(value):
                raise ValueError(value)
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            message=error_message or f"Expected integer, got {type(value).__name__}"
        )

    if min_value is not None and int_value < min_value:
        raise ValidationError(message=error_message or f"Value must be at least {min_value}")

    if max_value is not None and int_value > max_value:
        raise ValidationError(
            message=error_message or f"Value cannot be greater than {max_value}"
        )

    return int_value


def validate_discord_id(
    value: Any, mention_pattern: Optional[Pattern] = None, error_message: Optional[str] = None
) -> str:
    """
    Validate a Discord ID, either bare or wrapped in mention syntax.

    Args:
        value: The value to validate
        mention_pattern: Mention syntax to accept, with the ID as group 1
        error_message: Custom error message to use if validation fails

    Returns:
        The validated Discord ID as a string

    Raises:
        ValidationError: If the value is not a valid Discord ID
    """
    if not isinstance(value, str):
        raise ValidationError(message=error_message or "Invalid Discord ID format")

    value = value.strip()
    if mention_pattern is not None:
        match = mention_pattern.match(value)
        if match:
            value = match.group(1)

    if not SNOWFLAKE_PATTERN.fullmatch(value):
        raise ValidationError(message=error_message or "Invalid Discord ID format")

    # Discord IDs are snowflakes, which are 64-bit integers
    id_value = int(value)
    if id_value <= 0 or id_value >= (1 << 64):
        raise ValidationError(message=error_message or "Discord ID out of valid range")

    return str(id_value)


# Command argument parsers


def parse_channel_reference(token: Optional[str]) -> str:
    """Parse ``<#id>`` or a bare channel id."""
    return validate_discord_id(
        token or "", CHANNEL_MENTION_PATTERN, error_message="Not a valid channel!"
    )


def parse_role_reference(token: Optional[str]) -> str:
    """Parse ``<@&id>`` or a bare role id."""
    return validate_discord_id(
        token or "", ROLE_MENTION_PATTERN, error_message="Not a valid role!"
    )


def parse_mention_policy(token: Optional[str]) -> MentionPolicy:
    """Parse a ``ping_role`` argument.

    ``"0"`` turns pings off, ``"1"`` pings everyone, anything else must be a
    role reference.
    """
    token = (token or "").strip()
    if token == "0":
        return MentionPolicy.none()
    if token == "1":
        return MentionPolicy.everyone()
    return MentionPolicy.role(parse_role_reference(token))


def parse_content_id(token: Optional[str], error_message: str = "Please enter a valid ID!") -> ContentId:
    """Parse a custom question or poll id; it must be a positive integer."""
    return validate_integer(token, min_value=1, max_value=(1 << 31) - 1, error_message=error_message)


def parse_question_body(text: Optional[str]) -> str:
    """Validate a submitted question."""
    return validate_string(text, min_length=1, error_message="Question not accepted")


def parse_poll_body(text: Optional[str]) -> PollItem:
    """Split a submitted poll into its prompt and two options.

    The body must be exactly three lines, none of them blank.

    Raises:
        FormatError: If the body does not have that shape.
    """
    lines = [line.strip() for line in (text or "").strip().splitlines()]
    if len(lines) != 3 or not all(lines):
        raise FormatError(
            expected_format=POLL_FORMAT,
            message="Follow this format when submitting new polls!",
            field="poll",
        )
    return PollItem(*lines)
