"""
Configuration module for the QOTD bot.

This module provides a centralized configuration system with validation and
support for different environments (development, testing, production).
Values come from environment variables, optionally read from a ``.env`` file,
and are validated by a pydantic model before the bot starts.
"""

import logging
import os
from enum import Enum
from functools import lru_cache
from typing import ClassVar, Optional, Set

from pydantic import BaseModel, Field, ValidationError, field_validator


# Define environment types
class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


# Define log format types
class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class BotConfig(BaseModel):
    """
    Configuration model with validation.

    Sensitive values are marked so they can be kept out of logs.
    """

    environment: Environment = Field(
        Environment.DEVELOPMENT, description="Deployment environment"
    )

    # Bot settings
    bot_token: str = Field(..., description="Discord bot token", json_schema_extra={"sensitive": True})
    command_prefix: str = Field("q!", description="Prefix for text commands")
    admin_role_name: str = Field(
        "qotd_admin", description="Role allowed to use the bot's commands"
    )
    custom_content_limit: int = Field(
        100, ge=1, description="Maximum custom questions and polls per guild, each"
    )

    # Logging settings
    logging_level: int = Field(logging.INFO, description="Logging level")
    logfile: Optional[str] = Field("qotd", description="Log file name, without extension")
    log_format: LogFormat = Field(
        LogFormat.CONSOLE, description="Log output format (json or console)"
    )

    # Database settings
    database_url: str = Field(
        ...,
        description="SQLAlchemy async database URL",
        json_schema_extra={"sensitive": True},
    )
    db_pool_size: int = Field(10, ge=1, description="Database connection pool size")
    db_echo: bool = Field(False, description="Log every SQL statement")

    _sensitive_fields: ClassVar[Set[str]] = {"bot_token", "database_url"}

    @field_validator("bot_token", "database_url")
    @classmethod
    def must_not_be_empty(cls, v, info):
        """Validate that required settings are not empty."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v.strip()

    @field_validator("command_prefix", "admin_role_name")
    @classmethod
    def must_not_be_blank(cls, v, info):
        if not v or v != v.strip():
            raise ValueError(f"{info.field_name} must be non-empty without surrounding spaces")
        return v

    @classmethod
    def get_sensitive_fields(cls) -> Set[str]:
        """Get the set of sensitive field names that should be handled securely."""
        return cls._sensitive_fields

    def safe_dump(self) -> dict:
        """Dump the configuration with sensitive values masked."""
        data = self.model_dump(mode="json")
        for name in self.get_sensitive_fields():
            if data.get(name):
                data[name] = "********"
        return data


def load_from_env(dotenv: bool = True) -> BotConfig:
    """
    Load configuration from environment variables.

    Args:
        dotenv: Whether to read a ``.env`` file first. Variables already set
            in the environment take precedence.

    Returns:
        BotConfig: A validated configuration object

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    if dotenv:
        from dotenv import load_dotenv

        load_dotenv()

    missing_vars = []

    def get_env(name, default=None, required=False):
        value = os.getenv(name, default)
        if required and (value is None or value == ""):
            missing_vars.append(name)
        return value

    bot_token = get_env("BOT_TOKEN", "", required=True)
    database_url = get_env("DATABASE_URL", "", required=True)

    if missing_vars:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )

    values = {
        "bot_token": bot_token,
        "database_url": database_url,
        "environment": get_env("ENVIRONMENT", Environment.DEVELOPMENT.value),
        "command_prefix": get_env("COMMAND_PREFIX", "q!"),
        "admin_role_name": get_env("ADMIN_ROLE_NAME", "qotd_admin"),
        "custom_content_limit": get_env("CUSTOM_CONTENT_LIMIT", "100"),
        "logfile": get_env("LOGFILE", "qotd") or None,
        "log_format": get_env("LOG_FORMAT", LogFormat.CONSOLE.value),
        "db_pool_size": get_env("DB_POOL_SIZE", "10"),
        "db_echo": get_env("DB_ECHO", "false"),
    }

    level_name = get_env("LOGGING_LEVEL")
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Invalid LOGGING_LEVEL value: {level_name}")
        values["logging_level"] = level

    try:
        config = BotConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}") from e

    # Per-environment overrides
    if config.environment is Environment.TESTING:
        config.logging_level = logging.DEBUG
    elif config.environment is Environment.PRODUCTION and not level_name:
        config.logging_level = logging.WARNING

    return config


@lru_cache(maxsize=1)
def get_config() -> BotConfig:
    """Load the process configuration once and reuse it."""
    return load_from_env()
