"""
Tests for command routing.

The router runs against real repositories on in-memory SQLite and a fake
guild directory (see conftest.py), so these tests exercise each command
from argument text to stored state.
"""

import pytest

from models.domain import MentionPolicy, PollItem
from tests.fixtures import CHANNEL_A, GUILD_A, GUILD_B, ROLE_A
from utils.command_router import POLL_OF_THE_DAY, CommandStatus
from utils.exceptions import EmptyPoolError, ResourceNotFoundError
from utils.validation import POLL_FORMAT


async def configure_channel(router, guild_id=GUILD_A, channel_id=CHANNEL_A):
    result = await router.dispatch("set_channel", guild_id, f"<#{channel_id}>")
    assert result.status is CommandStatus.OK


# Dispatch


async def test_unknown_command(router):
    with pytest.raises(ResourceNotFoundError):
        await router.dispatch("not_a_command", GUILD_A)


async def test_aliases_and_case(router):
    result = await router.dispatch("SET_QOTD_CHANNEL", GUILD_A, f"<#{CHANNEL_A}>")
    assert result.message == "Channel set!"

    result = await router.dispatch("qotd_channel", GUILD_A)
    assert result.message == f"Channel is set to <#{CHANNEL_A}>"


def test_every_command_has_a_handler(router):
    assert set(router.command_names) == {
        "help", "set_channel", "channel", "qotd", "custom_qotd", "submit_qotd",
        "delete_question", "list_qotd", "ping_role", "poll", "submit_poll",
        "custom_poll", "delete_poll", "list_polls",
    }


async def test_help_lists_commands_with_prefix(router):
    result = await router.dispatch("help", GUILD_A)
    assert result.title == "Help"
    assert "**Current command prefix:** q!" in result.details
    for name in ("qotd", "submit_poll", "ping_role", "delete_poll"):
        assert f"**{name}" in result.details


# Channel


async def test_set_channel_rejects_bad_token(router):
    result = await router.dispatch("set_channel", GUILD_A, "general")
    assert result.status is CommandStatus.INVALID
    assert result.message == "Not a valid channel!"


async def test_set_channel_rejects_channel_from_another_guild(router, guild_configs):
    result = await router.dispatch("set_channel", GUILD_B, f"<#{CHANNEL_A}>")
    assert result.status is CommandStatus.NOT_IN_GUILD
    assert result.message == "Channel not found on this server!"
    assert await guild_configs.get_channel(GUILD_B) is None


async def test_channel_not_set(router):
    result = await router.dispatch("channel", GUILD_A)
    assert result.status is CommandStatus.CHANNEL_NOT_SET
    assert result.message == "Channel not set!"


# Questions


async def test_qotd_requires_channel(router, questions):
    await questions.add_curated(["Q"])
    result = await router.dispatch("qotd", GUILD_A)
    assert result.message == "Channel not set!"


async def test_qotd_delivers_with_ping(router, questions):
    await questions.add_curated(["What's your favorite color?"])
    await configure_channel(router)
    await router.dispatch("ping_role", GUILD_A, f"<@&{ROLE_A}>")

    result = await router.dispatch("qotd", GUILD_A)

    assert result.status is CommandStatus.DELIVER
    assert result.channel_id == CHANNEL_A
    assert result.message == f"<@&{ROLE_A}> What's your favorite color?"


async def test_qotd_with_empty_pool_raises(router):
    await configure_channel(router)
    with pytest.raises(EmptyPoolError):
        await router.dispatch("qotd", GUILD_A)


async def test_submit_and_list_questions(router):
    assert (await router.dispatch("submit_qotd", GUILD_A, "First?")).message == "Question Submitted"
    await router.dispatch("submit_qotd", GUILD_A, "Second?")

    result = await router.dispatch("list_qotd", GUILD_A)

    assert result.status is CommandStatus.LISTING
    assert [text for _, text in result.entries] == ["First?", "Second?"]
    assert result.title == "Questions"


async def test_submit_empty_question(router):
    result = await router.dispatch("submit_qotd", GUILD_A, "   ")
    assert result.status is CommandStatus.INVALID
    assert result.message == "Question not accepted"


async def test_submit_question_over_capacity(router, questions):
    questions.limit = 1
    await router.dispatch("submit_qotd", GUILD_A, "one")
    result = await router.dispatch("submit_qotd", GUILD_A, "two")
    assert result.status is CommandStatus.CAPACITY_EXCEEDED
    assert result.message == (
        "Too many custom questions saved! Please delete some before adding more!"
    )


async def test_list_questions_when_empty(router):
    result = await router.dispatch("list_qotd", GUILD_A)
    assert result.status is CommandStatus.NO_CONTENT
    assert result.message == "No custom questions found!"


async def test_delete_question(router, questions):
    ids = [await questions.submit_custom(GUILD_A, f"q{n}") for n in range(1, 4)]

    result = await router.dispatch("delete_question", GUILD_A, str(ids[1]))

    assert result.message == "Question deleted!"
    listing = await router.dispatch("list_qotd", GUILD_A)
    assert [item_id for item_id, _ in listing.entries] == [ids[0], ids[2]]


async def test_delete_question_of_another_guild(router, questions):
    item_id = await questions.submit_custom(GUILD_B, "theirs")
    result = await router.dispatch("delete_question", GUILD_A, str(item_id))
    assert result.status is CommandStatus.NOT_FOUND
    assert result.message == "Question not found!"
    assert await questions.count_custom(GUILD_B) == 1


async def test_delete_question_bad_id(router):
    result = await router.dispatch("delete_question", GUILD_A, "abc")
    assert result.status is CommandStatus.INVALID
    assert result.message == "Please enter a valid ID!"


async def test_delete_question_without_id_lists_choices(router, questions):
    await questions.submit_custom(GUILD_A, "pick one")
    result = await router.dispatch("delete_question", GUILD_A)
    assert result.status is CommandStatus.LISTING
    assert result.message == "Please specify the ID of the question"


async def test_custom_qotd_by_id(router, questions):
    await configure_channel(router)
    item_id = await questions.submit_custom(GUILD_A, "Custom one")

    result = await router.dispatch("custom_qotd", GUILD_A, str(item_id))

    assert result.status is CommandStatus.DELIVER
    assert result.message == "Custom one"


async def test_custom_qotd_messages(router):
    await configure_channel(router)

    result = await router.dispatch("custom_qotd", GUILD_A)
    assert result.message == "No custom questions found!"

    result = await router.dispatch("custom_qotd", GUILD_A, "77")
    assert result.message == "Question does not exist!"

    result = await router.dispatch("custom_qotd", GUILD_A, "seventy")
    assert result.message == "Not a valid question ID"


async def test_custom_qotd_rejects_underscored_id(router, questions):
    await configure_channel(router)
    for n in range(10):
        await questions.submit_custom(GUILD_A, f"q{n}")

    result = await router.dispatch("custom_qotd", GUILD_A, "1_0")

    assert result.status is CommandStatus.INVALID
    assert result.message == "Not a valid question ID"


# Ping role


async def test_ping_role_without_argument_shows_setting(router):
    result = await router.dispatch("ping_role", GUILD_A)
    assert "Current setting is 0" in result.message
    assert result.title == "Parameters"


async def test_ping_role_everyone(router, guild_configs):
    result = await router.dispatch("ping_role", GUILD_A, "1")
    assert result.message == "Ping role updated!"
    assert await guild_configs.get_mention_policy(GUILD_A) == MentionPolicy.everyone()


async def test_ping_role_unknown_role(router, guild_configs):
    result = await router.dispatch("ping_role", GUILD_B, f"<@&{ROLE_A}>")
    assert result.status is CommandStatus.INVALID
    assert result.message == "Not a valid role!"
    assert await guild_configs.get_mention_policy(GUILD_B) == MentionPolicy.none()


async def test_ping_role_bad_token(router):
    result = await router.dispatch("ping_role", GUILD_A, "somebody")
    assert result.message == "Not a valid role!"


# Polls


async def test_poll_delivers_curated_poll(router, polls):
    poll = PollItem("Cats or dogs?", "Cats", "Dogs")
    await polls.add_curated([poll])
    await configure_channel(router)
    await router.dispatch("ping_role", GUILD_A, "1")

    result = await router.dispatch("poll", GUILD_A)

    assert result.status is CommandStatus.DELIVER
    assert result.message == f"@everyone {POLL_OF_THE_DAY}"
    assert result.poll == poll


async def test_submit_poll(router, polls):
    result = await router.dispatch("submit_poll", GUILD_A, "Tea or coffee?\nTea\nCoffee")
    assert result.message == "Poll Submitted"
    assert await polls.list_custom(GUILD_A) == [
        (1, PollItem("Tea or coffee?", "Tea", "Coffee"))
    ]


async def test_submit_poll_wrong_shape(router, polls):
    result = await router.dispatch("submit_poll", GUILD_A, "Tea or coffee?\nTea")
    assert result.status is CommandStatus.INVALID
    assert result.message == "Follow this format when submitting new polls!"
    assert result.details == POLL_FORMAT
    assert await polls.count_custom(GUILD_A) == 0


async def test_custom_poll_empty(router):
    await configure_channel(router)
    result = await router.dispatch("custom_poll", GUILD_A)
    assert result.message == "No custom polls saved!\nAdd some with submit_poll!"


async def test_custom_poll_unknown_id(router):
    await configure_channel(router)
    result = await router.dispatch("custom_poll", GUILD_A, "3")
    assert result.message == "Poll does not exist!"


async def test_list_and_delete_polls(router, polls):
    item_id = await polls.submit_custom(GUILD_A, PollItem("Up or down?", "Up", "Down"))

    listing = await router.dispatch("list_polls", GUILD_A)
    assert listing.entries == ((item_id, "Up or down?"),)

    assert (await router.dispatch("delete_poll", GUILD_A, str(item_id))).message == "Poll deleted!"
    assert (await router.dispatch("delete_poll", GUILD_A, str(item_id))).message == "Poll not found!"
    assert (await router.dispatch("list_poll", GUILD_A)).message == "No custom polls found!"
