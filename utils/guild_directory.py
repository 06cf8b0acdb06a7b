"""Guild membership lookups backed by the discord.py cache."""

from discord.ext import commands


class DiscordGuildDirectory:
    """``GuildDirectory`` implementation that reads the bot's guild cache.

    Ids that are not numeric, or guilds the bot is not in, answer False.
    """

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    def _guild(self, guild_id: str):
        try:
            return self.bot.get_guild(int(guild_id))
        except (TypeError, ValueError):
            return None

    async def has_channel(self, guild_id: str, channel_id: str) -> bool:
        guild = self._guild(guild_id)
        if guild is None:
            return False
        try:
            return guild.get_channel(int(channel_id)) is not None
        except (TypeError, ValueError):
            return False

    async def has_role(self, guild_id: str, role_id: str) -> bool:
        guild = self._guild(guild_id)
        if guild is None:
            return False
        try:
            return guild.get_role(int(role_id)) is not None
        except (TypeError, ValueError):
            return False
