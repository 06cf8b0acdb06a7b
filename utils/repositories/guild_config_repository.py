"""Repository for per-guild delivery settings."""

import logging

from sqlalchemy import select

from models.domain import GuildConfig, MentionKind, MentionPolicy
from models.tables.channel import DeliveryChannel
from models.tables.ping_role import PingRole
from utils.repository import BaseRepository

# Persisted encoding of the non-role mention policies
NO_PING = "0"
PING_EVERYONE = "1"
# Stored role ids never collide with the sentinels above
ROLE_PREFIX = "role:"


def encode_mention_policy(policy: MentionPolicy) -> str:
    """Encode a mention policy for the ping_roles table."""
    if policy.kind is MentionKind.NONE:
        return NO_PING
    if policy.kind is MentionKind.EVERYONE:
        return PING_EVERYONE
    return f"{ROLE_PREFIX}{policy.role_id}"


def decode_mention_policy(value: str | None) -> MentionPolicy:
    """Decode a ping_roles value; a missing row means no ping.

    Rows written before role ids were prefixed hold the bare id.
    """
    if value is None or value == NO_PING:
        return MentionPolicy.none()
    if value == PING_EVERYONE:
        return MentionPolicy.everyone()
    if value.startswith(ROLE_PREFIX):
        return MentionPolicy.role(value[len(ROLE_PREFIX):])
    return MentionPolicy.role(value)


class GuildConfigRepository(BaseRepository):
    """Repository for managing guild delivery settings.

    Stores the delivery channel and mention policy of each guild. Writes are
    single-row upserts, so repeating a write is harmless and the last write
    wins.
    """

    def __init__(self, session_maker) -> None:
        super().__init__(session_maker)
        self.logger = logging.getLogger(__name__)

    async def set_channel(self, guild_id: str, channel_id: str) -> None:
        """Set the delivery channel for a guild.

        Args:
            guild_id: The Discord guild ID.
            channel_id: The channel ID, already checked to belong to the guild.
        """
        async with self.session("set_channel") as session:
            await session.execute(
                self.upsert_statement(
                    session,
                    DeliveryChannel,
                    {"guild_id": str(guild_id), "channel_id": str(channel_id)},
                    index_elements=["guild_id"],
                )
            )
            await session.commit()
        self.logger.info(f"Set delivery channel for guild {guild_id} to {channel_id}")

    async def get_channel(self, guild_id: str) -> str | None:
        """Get the delivery channel for a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The channel ID, or None if no channel has been set.
        """
        async with self.session("get_channel") as session:
            result = await session.execute(
                select(DeliveryChannel.channel_id).where(
                    DeliveryChannel.guild_id == str(guild_id)
                )
            )
            return result.scalar_one_or_none()

    async def set_mention_policy(self, guild_id: str, policy: MentionPolicy) -> None:
        """Set who gets pinged on delivery.

        Role ids are stored as given; checking that the role exists is up to
        the caller.

        Args:
            guild_id: The Discord guild ID.
            policy: The new mention policy.
        """
        async with self.session("set_mention_policy") as session:
            await session.execute(
                self.upsert_statement(
                    session,
                    PingRole,
                    {
                        "guild_id": str(guild_id),
                        "ping_role": encode_mention_policy(policy),
                    },
                    index_elements=["guild_id"],
                )
            )
            await session.commit()
        self.logger.info(
            f"Set mention policy for guild {guild_id} to {policy.kind.value}"
        )

    async def get_mention_policy(self, guild_id: str) -> MentionPolicy:
        """Get the mention policy for a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The stored policy, or ``MentionPolicy.none()`` if unset.
        """
        async with self.session("get_mention_policy") as session:
            result = await session.execute(
                select(PingRole.ping_role).where(PingRole.guild_id == str(guild_id))
            )
            return decode_mention_policy(result.scalar_one_or_none())

    async def get_config(self, guild_id: str) -> GuildConfig:
        """Get every setting of a guild in one value."""
        return GuildConfig(
            guild_id=str(guild_id),
            delivery_channel=await self.get_channel(guild_id),
            mention_policy=await self.get_mention_policy(guild_id),
        )
