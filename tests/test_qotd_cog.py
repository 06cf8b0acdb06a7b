"""
Tests for the QOTD cog.

Commands are invoked through their callbacks with mock contexts built by
the Faker-backed factories; the router underneath uses real repositories
on in-memory SQLite.
"""

from unittest.mock import AsyncMock

import discord
import pytest
from discord.ext import commands

from cogs.qotd import POLL_REACTIONS, QotdCog, build_listing_embeds, build_poll_embed
from config import BotConfig
from models.domain import PollItem
from tests.mock_factories import (
    MockBotFactory,
    MockChannelFactory,
    MockContextFactory,
    MockGuildFactory,
    MockMemberFactory,
    MockMessageFactory,
    MockRoleFactory,
)
from utils.command_router import CommandResult, CommandRouter, CommandStatus
from utils.error_handling import handle_global_command_error
from utils.guild_directory import DiscordGuildDirectory
from utils.service_container import ServiceContainer


@pytest.fixture
def role():
    return MockRoleFactory.create(name="Question Fans")


@pytest.fixture
def channel():
    return MockChannelFactory.create_text_channel(name="qotd")


@pytest.fixture
def guild(role, channel):
    guild = MockGuildFactory.create(roles=[role], channels=[channel])
    channel.guild = guild
    return guild


@pytest.fixture
def bot(guild, guild_configs, questions, polls):
    bot = MockBotFactory.create(guilds=[guild])
    container = ServiceContainer()
    container.register(
        "config", BotConfig(bot_token="token", database_url="sqlite+aiosqlite://")
    )
    container.register(
        "command_router",
        CommandRouter(guild_configs, questions, polls, DiscordGuildDirectory(bot)),
    )
    bot.container = container
    return bot


@pytest.fixture
def cog(bot):
    return QotdCog(bot)


@pytest.fixture
def ctx(bot, guild):
    admin = MockMemberFactory.create(manage_guild=True)
    return MockContextFactory.create(author=admin, guild=guild, bot=bot)


async def set_channel(cog, ctx, channel):
    await cog.set_channel.callback(cog, ctx, argument=channel.mention)
    ctx.reply.assert_awaited_with("Channel set!", embed=None)


# Permission checks


async def test_cog_check_rejects_direct_messages(cog):
    ctx = MockContextFactory.create(in_guild=False)
    with pytest.raises(commands.NoPrivateMessage):
        await cog.cog_check(ctx)


async def test_cog_check_requires_admin_role(cog, guild):
    member = MockMemberFactory.create(roles=[MockRoleFactory.create(name="Member")])
    ctx = MockContextFactory.create(author=member, guild=guild)
    with pytest.raises(commands.MissingRole):
        await cog.cog_check(ctx)


async def test_denied_member_gets_permission_reply(cog, guild):
    member = MockMemberFactory.create(roles=[MockRoleFactory.create(name="Member")])
    ctx = MockContextFactory.create(author=member, guild=guild, command_name="qotd")

    with pytest.raises(commands.CheckFailure) as exc_info:
        await cog.cog_check(ctx)
    await handle_global_command_error(ctx, exc_info.value)

    ctx.reply.assert_awaited_once_with("You don't have permission to use this command.")


async def test_cog_check_accepts_admin_role(cog, guild):
    member = MockMemberFactory.create(roles=[MockRoleFactory.create(name="qotd_admin")])
    ctx = MockContextFactory.create(author=member, guild=guild)
    assert await cog.cog_check(ctx)


async def test_cog_check_accepts_manage_server(cog, ctx):
    assert await cog.cog_check(ctx)


# Delivery


async def test_qotd_is_sent_to_configured_channel(cog, ctx, channel, role, questions):
    await questions.add_curated(["What's your favorite color?"])
    await set_channel(cog, ctx, channel)
    await cog.ping_role.callback(cog, ctx, argument=role.mention)

    await cog.qotd.callback(cog, ctx, argument="")

    channel.send.assert_awaited_once_with(f"<@&{role.id}> What's your favorite color?")


async def test_poll_is_sent_as_embed_with_reactions(cog, ctx, channel, polls):
    await polls.add_curated([PollItem("Cats or dogs?", "Cats", "Dogs")])
    await set_channel(cog, ctx, channel)
    sent = MockMessageFactory.create(channel)
    channel.send = AsyncMock(return_value=sent)

    await cog.poll.callback(cog, ctx, argument="")

    content = channel.send.await_args.args[0]
    embed = channel.send.await_args.kwargs["embed"]
    assert content == "Poll of the day!"
    assert embed.title == "Cats or dogs?"
    assert [call.args[0] for call in sent.add_reaction.await_args_list] == list(POLL_REACTIONS)


async def test_delivery_without_channel_replies(cog, ctx, questions):
    await questions.add_curated(["Q"])
    await cog.qotd.callback(cog, ctx, argument="")
    ctx.reply.assert_awaited_once_with("Channel not set!", embed=None)


async def test_delivery_to_deleted_channel(cog, ctx, guild, channel, questions):
    await questions.add_curated(["Q"])
    await set_channel(cog, ctx, channel)
    guild.channels = []

    await cog.qotd.callback(cog, ctx, argument="")

    ctx.reply.assert_awaited_with("Channel not found on this server!")
    channel.send.assert_not_awaited()


async def test_set_channel_from_another_guild(cog, ctx):
    stranger = MockChannelFactory.create_text_channel()
    await cog.set_channel.callback(cog, ctx, argument=stranger.mention)
    ctx.reply.assert_awaited_once_with("Channel not found on this server!", embed=None)


# Replies


async def test_empty_curated_pool_gives_generic_failure(cog, ctx, channel):
    await set_channel(cog, ctx, channel)
    await cog.qotd.callback(cog, ctx, argument="")
    ctx.reply.assert_awaited_with("Something went wrong!")


async def test_list_qotd_sends_embed(cog, ctx):
    await cog.submit_qotd.callback(cog, ctx, argument="First?")
    await cog.submit_qotd.callback(cog, ctx, argument="Second?")

    await cog.list_qotd.callback(cog, ctx, argument="")

    message = ctx.reply.await_args.args[0]
    embed = ctx.reply.await_args.kwargs["embed"]
    assert message == "Here's a list of all saved custom questions"
    assert embed.title == "Questions"
    assert "1 - First?" in embed.description
    assert "2 - Second?" in embed.description


async def test_submit_poll_format_hint(cog, ctx):
    await cog.submit_poll.callback(cog, ctx, argument="Only a question")

    embed = ctx.reply.await_args.kwargs["embed"]
    assert ctx.reply.await_args.args[0] == "Follow this format when submitting new polls!"
    assert embed.title == "Custom poll format"
    assert "Option1" in embed.description


async def test_help_reply(cog, ctx):
    await cog.help.callback(cog, ctx, argument="")
    embed = ctx.reply.await_args.kwargs["embed"]
    assert embed.title == "Help"


# Rendering helpers


def test_build_poll_embed():
    embed = build_poll_embed(PollItem("Up or down?", "Up", "Down"))
    assert embed.title == "Up or down?"
    assert embed.description == "1️⃣ - Up\n2️⃣ - Down"


def test_build_listing_embeds_splits_long_lists():
    entries = tuple((n, "x" * 500) for n in range(1, 101))
    result = CommandResult(
        CommandStatus.LISTING, "list", entries=entries, title="Questions", details="ID - Question"
    )

    embeds = build_listing_embeds(result)

    assert len(embeds) > 1
    assert all(len(embed.description) <= 4096 for embed in embeds)
    assert embeds[0].description.startswith("ID - Question")
    lines = [line for embed in embeds for line in embed.description.splitlines()]
    assert sum(1 for line in lines if line[0].isdigit()) == 100
    assert isinstance(embeds[0], discord.Embed)
