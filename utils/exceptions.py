"""Custom exception hierarchy for the QOTD bot.

This module defines the exceptions raised by the repositories, the selection
layer and the command router. Command handlers and the global error handler
catch them and turn them into user-facing replies.
"""


class QotdError(Exception):
    """Base exception for all bot errors."""

    def __init__(self, message: str = "An error occurred", *args, **kwargs) -> None:
        self.message = message
        super().__init__(message, *args, **kwargs)


# Input Validation Errors


class UserInputError(QotdError):
    """Errors caused by invalid user input."""

    def __init__(self, message: str = "Invalid user input", *args, **kwargs) -> None:
        super().__init__(message, *args, **kwargs)


class ValidationError(UserInputError):
    """Errors caused by input validation failures."""

    def __init__(self, field: str = None, message: str = None, *args, **kwargs) -> None:
        self.field = field
        if field and not message:
            message = f"Invalid value for {field}"
        elif not message:
            message = "Validation failed"
        super().__init__(message, *args, **kwargs)


class FormatError(ValidationError):
    """Errors caused by incorrectly formatted input."""

    def __init__(
        self,
        expected_format: str = None,
        message: str = None,
        field: str = None,
        *args,
        **kwargs,
    ) -> None:
        self.expected_format = expected_format
        if expected_format and not message:
            message = f"Input has incorrect format. Expected: {expected_format}"
        elif not message:
            message = "Input has incorrect format"
        super().__init__(field, message, *args, **kwargs)


class CapacityExceededError(UserInputError):
    """A guild already holds the maximum number of custom items of a kind."""

    def __init__(
        self,
        content_type: str = "item",
        limit: int | None = None,
        message: str = None,
        *args,
        **kwargs,
    ) -> None:
        self.content_type = content_type
        self.limit = limit
        if not message:
            message = f"Custom {content_type} limit reached"
            if limit is not None:
                message = f"{message} ({limit})"
        super().__init__(message, *args, **kwargs)


# Resource Errors


class ResourceNotFoundError(QotdError):
    """Errors when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: str | None = None,
        *args,
        **kwargs,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id

        if resource_id:
            message = f"{resource_type.capitalize()} with ID {resource_id} not found"
        else:
            message = f"{resource_type.capitalize()} not found"

        super().__init__(message, *args, **kwargs)


# Configuration Errors


class ConfigurationError(QotdError):
    """Errors related to bot configuration."""

    def __init__(self, message: str = "Bot configuration error", *args, **kwargs) -> None:
        super().__init__(message, *args, **kwargs)


class EmptyPoolError(ConfigurationError):
    """The curated pool has no active entries.

    The curated pools are provisioned out-of-band and must never be empty in
    production, so this is reported as a configuration fault.
    """

    def __init__(self, content_type: str = "content", message: str = None, *args, **kwargs) -> None:
        self.content_type = content_type
        if not message:
            message = f"No active curated {content_type} available"
        super().__init__(message, *args, **kwargs)


# Database Errors


class DatabaseError(QotdError):
    """Errors related to database operations."""

    def __init__(self, message: str = "Database operation failed", *args, **kwargs) -> None:
        super().__init__(message, *args, **kwargs)


class QueryError(DatabaseError):
    """Errors related to database queries."""

    def __init__(self, query: str = None, message: str = None, *args, **kwargs) -> None:
        self.query = query
        if not message:
            message = "Database query failed"
        super().__init__(message, *args, **kwargs)


class ConnectionError(DatabaseError):
    """Errors related to database connections."""

    def __init__(self, message: str = "Failed to connect to database", *args, **kwargs) -> None:
        super().__init__(message, *args, **kwargs)
