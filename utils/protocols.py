"""Protocol classes for defining interfaces in the application.

These protocols describe what the command router needs from its
collaborators, so it can be driven by discord.py objects in production and
by plain fakes in tests.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GuildDirectory(Protocol):
    """Answers membership questions about a guild's channels and roles."""

    async def has_channel(self, guild_id: str, channel_id: str) -> bool:
        """Whether the channel exists in the guild."""
        ...

    async def has_role(self, guild_id: str, role_id: str) -> bool:
        """Whether the role exists in the guild."""
        ...
