"""
Test fixtures for the QOTD bot.

This module provides the building blocks the pytest fixtures in conftest.py
and the property-based tests share: well-known ids, an in-memory database
and a guild directory that needs no Discord connection.
"""

import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(os.path.dirname(__file__))))

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

# Import all models to ensure they're registered with Base.metadata
import models.tables  # noqa: F401
from models.base import Base

GUILD_A = "111111111111111111"
GUILD_B = "222222222222222222"
CHANNEL_A = "333333333333333333"
ROLE_A = "555"


async def create_test_engine() -> AsyncEngine:
    """Create an in-memory SQLite engine with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


class FakeGuildDirectory:
    """Guild directory backed by plain sets of ids per guild."""

    def __init__(self) -> None:
        self.channels: dict[str, set[str]] = {}
        self.roles: dict[str, set[str]] = {}

    def add_channel(self, guild_id: str, channel_id: str) -> None:
        self.channels.setdefault(guild_id, set()).add(channel_id)

    def add_role(self, guild_id: str, role_id: str) -> None:
        self.roles.setdefault(guild_id, set()).add(role_id)

    async def has_channel(self, guild_id: str, channel_id: str) -> bool:
        return channel_id in self.channels.get(guild_id, set())

    async def has_role(self, guild_id: str, role_id: str) -> bool:
        return role_id in self.roles.get(guild_id, set())
