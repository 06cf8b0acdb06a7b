"""
Question and poll of the day commands.

This cog is the Discord side of the bot: it turns prefix commands into
router calls and renders the results. Deliveries go to the guild's
configured channel, listings are sent as embeds and everything else is a
reply to the invoker.
"""

from typing import List

import discord
import structlog
from discord.ext import commands

from models.domain import PollItem
from utils.command_router import CommandResult, CommandRouter, CommandStatus
from utils.error_handling import handle_command_errors
from utils.logging import RequestContext

POLL_REACTIONS = ("1️⃣", "2️⃣")
POLL_COLOR = discord.Color.orange()
EMBED_COLOR = discord.Color(0x3CD63D)

# Discord caps embed descriptions at 4096 characters
EMBED_DESCRIPTION_LIMIT = 4096
LISTING_ENTRY_LIMIT = 200


def build_poll_embed(poll: PollItem) -> discord.Embed:
    """Embed showing the poll prompt with one reaction per option."""
    description = "\n".join(
        f"{emoji} - {option}"
        for emoji, option in zip(POLL_REACTIONS, (poll.option_a, poll.option_b))
    )
    return discord.Embed(title=poll.prompt, description=description, color=POLL_COLOR)


def build_listing_embeds(result: CommandResult) -> List[discord.Embed]:
    """Render ``(id, text)`` entries as one or more embeds.

    Long entries are shortened and the list is split so no description goes
    over Discord's limit.
    """
    lines = []
    for item_id, text in result.entries:
        text = " ".join(text.split())
        if len(text) > LISTING_ENTRY_LIMIT:
            text = text[: LISTING_ENTRY_LIMIT - 3] + "..."
        lines.append(f"{item_id} - {text}")

    pages: List[List[str]] = [[]]
    length = len(result.details or "")
    for line in lines:
        if length + len(line) + 1 > EMBED_DESCRIPTION_LIMIT and pages[-1]:
            pages.append([])
            length = 0
        pages[-1].append(line)
        length += len(line) + 1

    embeds = []
    for index, page in enumerate(pages):
        header = [result.details] if index == 0 and result.details else []
        embeds.append(
            discord.Embed(
                title=result.title if index == 0 else f"{result.title} (continued)",
                description="\n".join(header + page),
                color=EMBED_COLOR,
            )
        )
    return embeds


class QotdCog(commands.Cog, name="QOTD"):
    """Question of the day and poll of the day commands.

    Every command needs the configured admin role or the Manage Server
    permission, and only works inside a guild.
    """

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.logger = structlog.get_logger("cogs.qotd")
        self.router: CommandRouter = bot.container.get_typed("command_router", CommandRouter)
        self.admin_role_name: str = bot.container.get("config").admin_role_name

    async def cog_check(self, ctx: commands.Context) -> bool:
        if ctx.guild is None:
            raise commands.NoPrivateMessage()
        permissions = getattr(ctx.author, "guild_permissions", None)
        if permissions is not None and permissions.manage_guild:
            return True
        if discord.utils.get(getattr(ctx.author, "roles", []), name=self.admin_role_name):
            return True
        raise commands.MissingRole(self.admin_role_name)

    async def run_command(self, ctx: commands.Context, command: str, argument: str) -> None:
        """Dispatch ``command`` for the invoking guild and render the result."""
        guild_id = str(ctx.guild.id)
        async with RequestContext(
            self.logger, "command", command=command, guild_id=guild_id
        ):
            result = await self.router.dispatch(command, guild_id, argument)
            await self.render(ctx, result)

    async def render(self, ctx: commands.Context, result: CommandResult) -> None:
        if result.status is CommandStatus.DELIVER:
            await self.deliver(ctx, result)
            return

        if result.status is CommandStatus.LISTING:
            embeds = build_listing_embeds(result)
            await ctx.reply(result.message, embed=embeds[0])
            for embed in embeds[1:]:
                await ctx.send(embed=embed)
            return

        embed = None
        if result.title:
            embed = discord.Embed(
                title=result.title, description=result.details, color=EMBED_COLOR
            )
        await ctx.reply(result.message, embed=embed)

    async def deliver(self, ctx: commands.Context, result: CommandResult) -> None:
        channel = self.bot.get_channel(int(result.channel_id))
        if channel is None:
            self.logger.warning("delivery_channel_missing", channel_id=result.channel_id)
            await ctx.reply("Channel not found on this server!")
            return

        if result.poll is None:
            await channel.send(result.message)
        else:
            message = await channel.send(result.message, embed=build_poll_embed(result.poll))
            for emoji in POLL_REACTIONS:
                await message.add_reaction(emoji)
        self.logger.info("content_delivered", channel_id=result.channel_id)

    @commands.command(name="help")
    @handle_command_errors
    async def help(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Brings up the command reference."""
        await self.run_command(ctx, "help", argument)

    @commands.command(name="set_channel", aliases=["set_qotd_channel"])
    @handle_command_errors
    async def set_channel(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Sets which channel is used for questions of the day."""
        await self.run_command(ctx, "set_channel", argument)

    @commands.command(name="channel", aliases=["qotd_channel"])
    @handle_command_errors
    async def channel(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Shows which channel is used for questions of the day."""
        await self.run_command(ctx, "channel", argument)

    @commands.command(name="qotd")
    @handle_command_errors
    async def qotd(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Sends a random question of the day."""
        await self.run_command(ctx, "qotd", argument)

    @commands.command(name="custom_qotd")
    @handle_command_errors
    async def custom_qotd(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Sends a custom question, by id or at random."""
        await self.run_command(ctx, "custom_qotd", argument)

    @commands.command(name="submit_qotd")
    @handle_command_errors
    async def submit_qotd(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Submit a custom question."""
        await self.run_command(ctx, "submit_qotd", argument)

    @commands.command(name="delete_question")
    @handle_command_errors
    async def delete_question(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Deletes one of this server's custom questions."""
        await self.run_command(ctx, "delete_question", argument)

    @commands.command(name="list_qotd")
    @handle_command_errors
    async def list_qotd(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Lists this server's custom questions."""
        await self.run_command(ctx, "list_qotd", argument)

    @commands.command(name="ping_role")
    @handle_command_errors
    async def ping_role(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Sets who is pinged when a question or poll is delivered."""
        await self.run_command(ctx, "ping_role", argument)

    @commands.command(name="poll")
    @handle_command_errors
    async def poll(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Sends a random poll of the day."""
        await self.run_command(ctx, "poll", argument)

    @commands.command(name="submit_poll")
    @handle_command_errors
    async def submit_poll(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Submit a custom poll: a question and two options, one per line."""
        await self.run_command(ctx, "submit_poll", argument)

    @commands.command(name="custom_poll")
    @handle_command_errors
    async def custom_poll(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Sends a custom poll, by id or at random."""
        await self.run_command(ctx, "custom_poll", argument)

    @commands.command(name="delete_poll")
    @handle_command_errors
    async def delete_poll(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Deletes one of this server's custom polls."""
        await self.run_command(ctx, "delete_poll", argument)

    @commands.command(name="list_polls", aliases=["list_poll"])
    @handle_command_errors
    async def list_polls(self, ctx: commands.Context, *, argument: str = "") -> None:
        """Lists this server's custom polls."""
        await self.run_command(ctx, "list_polls", argument)


async def setup(bot: commands.Bot) -> None:
    """Add the cog to the bot."""
    await bot.add_cog(QotdCog(bot))
