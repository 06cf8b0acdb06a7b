"""
Command routing for the QOTD bot.

The router maps a command name to its handler once, at construction. A
handler receives the guild id and the raw argument text that followed the
command name, and returns a ``CommandResult`` describing what to send. It
never talks to Discord itself.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from models.domain import DeletionOutcome, GuildConfig, MentionKind, PollItem
from utils.exceptions import CapacityExceededError, FormatError, ResourceNotFoundError, ValidationError
from utils.ping_formatter import describe_policy, format_ping
from utils.protocols import GuildDirectory
from utils.repositories.content_repository import ContentRepository
from utils.repositories.guild_config_repository import GuildConfigRepository
from utils.selection import SelectionEngine, SelectionOutcome
from utils.validation import (
    parse_channel_reference,
    parse_content_id,
    parse_mention_policy,
    parse_poll_body,
    parse_question_body,
)

CHANNEL_MENTION_TEMPLATE = "<#{channel_id}>"
POLL_OF_THE_DAY = "Poll of the day!"

HELP_TEXT = (
    "**Current command prefix:** {prefix}\n\n"
    "**qotd** - Sends a random question of the day!\n"
    "**custom_qotd <Optional: id>** - Sends a question of the day from the list of custom questions!\n"
    "**set_channel <channel>** - Sets which channel is used for questions of the day.\n"
    "**channel** - Shows which channel is currently used for questions of the day.\n"
    "**submit_qotd <question>** - Submit a custom question.\n"
    "**delete_question <id>** - Deletes the specified question from the list of questions.\n"
    "**list_qotd** - Lists all custom questions saved for the server.\n"
    "**poll** - Sends a random poll of the day!\n"
    "**custom_poll <Optional: id>** - Sends a poll from the list of custom polls!\n"
    "**submit_poll <question>\\n<option 1>\\n<option 2>** - Submit a custom poll.\n"
    "**delete_poll <id>** - Deletes the specified poll from the list of polls.\n"
    "**list_polls** - Lists all custom polls saved for the server.\n"
    "**ping_role <0 (default)/1/<role>>** - Sets the ping setting for question of the day.\n"
    "**help** - Brings up this message!"
)

PING_ROLE_PARAMETERS = "<role> - Specific role\n1 - Everyone\n0 - Off (default)"


class CommandStatus(str, Enum):
    OK = "ok"
    DELIVER = "deliver"
    LISTING = "listing"
    INVALID = "invalid"
    NOT_IN_GUILD = "not_in_guild"
    NOT_FOUND = "not_found"
    NO_CONTENT = "no_content"
    CHANNEL_NOT_SET = "channel_not_set"
    CAPACITY_EXCEEDED = "capacity_exceeded"


@dataclass(frozen=True)
class CommandResult:
    """What a command produced, for the transport layer to render.

    ``DELIVER`` results go to ``channel_id``; everything else is a reply to
    the invoker. ``title``/``details`` describe an optional embed and
    ``entries`` holds ``(id, text)`` rows for listings.
    """

    status: CommandStatus
    message: str
    channel_id: Optional[str] = None
    poll: Optional[PollItem] = None
    entries: tuple[tuple[int, str], ...] = ()
    title: Optional[str] = None
    details: Optional[str] = None


Handler = Callable[[str, Optional[str]], Awaitable[CommandResult]]


@dataclass(frozen=True)
class ContentMessages:
    """User-facing wording for one kind of content."""

    noun: str
    list_title: str
    list_header: str
    submitted: str
    capacity: str
    deleted: str
    not_found: str
    does_not_exist: str
    no_custom: str
    no_custom_saved: str
    invalid_id: str


QUESTION_MESSAGES = ContentMessages(
    noun="question",
    list_title="Questions",
    list_header="ID - Question",
    submitted="Question Submitted",
    capacity="Too many custom questions saved! Please delete some before adding more!",
    deleted="Question deleted!",
    not_found="Question not found!",
    does_not_exist="Question does not exist!",
    no_custom="No custom questions found!",
    no_custom_saved="No custom questions found!",
    invalid_id="Not a valid question ID",
)

POLL_MESSAGES = ContentMessages(
    noun="poll",
    list_title="Polls",
    list_header="ID - Poll Question",
    submitted="Poll Submitted",
    capacity="Too many custom polls saved! Please delete some before adding more!",
    deleted="Poll deleted!",
    not_found="Poll not found!",
    does_not_exist="Poll does not exist!",
    no_custom="No custom polls found!",
    no_custom_saved="No custom polls saved!\nAdd some with submit_poll!",
    invalid_id="Not a valid poll ID",
)


class CommandRouter:
    """Maps command names to handlers and runs them for one guild at a time.

    Args:
        config_store: Per-guild settings.
        questions: Question repository.
        polls: Poll repository.
        directory: Membership checks for channel and role arguments.
        prefix: Command prefix shown in the help text.
    """

    ALIASES = {
        "set_qotd_channel": "set_channel",
        "qotd_channel": "channel",
        "list_poll": "list_polls",
    }

    def __init__(
        self,
        config_store: GuildConfigRepository,
        questions: ContentRepository[str],
        polls: ContentRepository[PollItem],
        directory: GuildDirectory,
        prefix: str = "q!",
    ) -> None:
        self.config_store = config_store
        self.questions = questions
        self.polls = polls
        self.question_selection = SelectionEngine(questions)
        self.poll_selection = SelectionEngine(polls)
        self.directory = directory
        self.prefix = prefix
        self.logger = structlog.get_logger("command_router")

        self._handlers: dict[str, Handler] = {
            "help": self.help,
            "set_channel": self.set_channel,
            "channel": self.channel,
            "qotd": self.qotd,
            "custom_qotd": self.custom_qotd,
            "submit_qotd": self.submit_qotd,
            "delete_question": self.delete_question,
            "list_qotd": self.list_qotd,
            "ping_role": self.ping_role,
            "poll": self.poll,
            "submit_poll": self.submit_poll,
            "custom_poll": self.custom_poll,
            "delete_poll": self.delete_poll,
            "list_polls": self.list_polls,
        }

    @property
    def command_names(self) -> list[str]:
        return list(self._handlers)

    def resolve(self, command: str) -> Handler:
        """Look up the handler for a command name or alias.

        Raises:
            ResourceNotFoundError: If no such command exists.
        """
        name = command.strip().lower()
        name = self.ALIASES.get(name, name)
        try:
            return self._handlers[name]
        except KeyError:
            raise ResourceNotFoundError("command", command) from None

    async def dispatch(
        self, command: str, guild_id: str, argument: Optional[str] = None
    ) -> CommandResult:
        """Run a command for a guild.

        Validation failures become ``INVALID`` results. Database and
        empty-pool errors propagate to the caller.

        Args:
            command: The command name, without prefix.
            guild_id: The guild the command was issued in.
            argument: Text following the command name, if any.
        """
        handler = self.resolve(command)
        argument = argument.strip() if argument else None
        guild_id = str(guild_id)

        try:
            result = await handler(guild_id, argument or None)
        except FormatError as e:
            result = CommandResult(
                CommandStatus.INVALID,
                e.message,
                title=f"Custom {e.field or 'input'} format",
                details=e.expected_format,
            )
        except ValidationError as e:
            result = CommandResult(CommandStatus.INVALID, e.message)

        self.logger.info(
            "command_completed",
            command=command,
            guild_id=guild_id,
            status=result.status.value,
        )
        return result

    # Shared helpers

    async def _deliver(
        self, config: GuildConfig, body: str, poll: Optional[PollItem] = None
    ) -> CommandResult:
        return CommandResult(
            CommandStatus.DELIVER,
            format_ping(config.mention_policy, body),
            channel_id=config.delivery_channel,
            poll=poll,
        )

    @staticmethod
    def _channel_not_set() -> CommandResult:
        return CommandResult(CommandStatus.CHANNEL_NOT_SET, "Channel not set!")

    async def _submit(
        self, repository: ContentRepository, messages: ContentMessages, guild_id: str, item
    ) -> CommandResult:
        try:
            await repository.submit_custom(guild_id, item)
        except CapacityExceededError:
            return CommandResult(CommandStatus.CAPACITY_EXCEEDED, messages.capacity)
        return CommandResult(CommandStatus.OK, messages.submitted)

    async def _listing(
        self,
        repository: ContentRepository,
        messages: ContentMessages,
        guild_id: str,
        message: str,
        label: Callable[[object], str],
    ) -> CommandResult:
        entries = await repository.list_custom(guild_id)
        if not entries:
            return CommandResult(CommandStatus.NO_CONTENT, messages.no_custom)
        return CommandResult(
            CommandStatus.LISTING,
            message,
            entries=tuple((item_id, label(item)) for item_id, item in entries),
            title=messages.list_title,
            details=messages.list_header,
        )

    async def _delete(
        self,
        repository: ContentRepository,
        messages: ContentMessages,
        guild_id: str,
        argument: Optional[str],
        label: Callable[[object], str],
    ) -> CommandResult:
        if argument is None:
            return await self._listing(
                repository,
                messages,
                guild_id,
                f"Please specify the ID of the {messages.noun}",
                label,
            )

        item_id = parse_content_id(argument)
        outcome = await repository.delete_custom(guild_id, item_id)
        if outcome is DeletionOutcome.DELETED:
            return CommandResult(CommandStatus.OK, messages.deleted)
        return CommandResult(CommandStatus.NOT_FOUND, messages.not_found)

    async def _custom(
        self,
        selection: SelectionEngine,
        messages: ContentMessages,
        guild_id: str,
        argument: Optional[str],
    ):
        item_id = None
        if argument is not None:
            item_id = parse_content_id(argument, error_message=messages.invalid_id)

        chosen = await selection.select_custom(guild_id, item_id)
        if chosen.outcome is SelectionOutcome.NOT_FOUND:
            return CommandResult(CommandStatus.NOT_FOUND, messages.does_not_exist)
        if chosen.outcome is SelectionOutcome.NO_CUSTOM_CONTENT:
            return CommandResult(CommandStatus.NO_CONTENT, messages.no_custom_saved)
        return chosen.item

    # Handlers

    async def help(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        return CommandResult(
            CommandStatus.OK,
            "Here's what I can do:",
            title="Help",
            details=HELP_TEXT.format(prefix=self.prefix),
        )

    async def set_channel(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        channel_id = parse_channel_reference(argument)
        if not await self.directory.has_channel(guild_id, channel_id):
            return CommandResult(
                CommandStatus.NOT_IN_GUILD, "Channel not found on this server!"
            )
        await self.config_store.set_channel(guild_id, channel_id)
        return CommandResult(CommandStatus.OK, "Channel set!")

    async def channel(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        channel_id = await self.config_store.get_channel(guild_id)
        if channel_id is None:
            return self._channel_not_set()
        mention = CHANNEL_MENTION_TEMPLATE.format(channel_id=channel_id)
        return CommandResult(
            CommandStatus.OK, f"Channel is set to {mention}", channel_id=channel_id
        )

    async def qotd(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        config = await self.config_store.get_config(guild_id)
        if config.delivery_channel is None:
            return self._channel_not_set()
        question = await self.question_selection.select_curated()
        return await self._deliver(config, question)

    async def custom_qotd(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        config = await self.config_store.get_config(guild_id)
        if config.delivery_channel is None:
            return self._channel_not_set()
        chosen = await self._custom(
            self.question_selection, QUESTION_MESSAGES, guild_id, argument
        )
        if isinstance(chosen, CommandResult):
            return chosen
        return await self._deliver(config, chosen)

    async def submit_qotd(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        question = parse_question_body(argument)
        return await self._submit(self.questions, QUESTION_MESSAGES, guild_id, question)

    async def delete_question(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        return await self._delete(
            self.questions, QUESTION_MESSAGES, guild_id, argument, str
        )

    async def list_qotd(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        return await self._listing(
            self.questions,
            QUESTION_MESSAGES,
            guild_id,
            "Here's a list of all saved custom questions",
            str,
        )

    async def ping_role(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        if argument is None:
            policy = await self.config_store.get_mention_policy(guild_id)
            return CommandResult(
                CommandStatus.OK,
                "Use this command to set the role to be pinged when posting a qotd\n"
                f"Current setting is {describe_policy(policy)}",
                title="Parameters",
                details=PING_ROLE_PARAMETERS,
            )

        policy = parse_mention_policy(argument)
        if policy.kind is MentionKind.ROLE and not await self.directory.has_role(
            guild_id, policy.role_id
        ):
            return CommandResult(CommandStatus.INVALID, "Not a valid role!")

        await self.config_store.set_mention_policy(guild_id, policy)
        return CommandResult(CommandStatus.OK, "Ping role updated!")

    async def poll(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        config = await self.config_store.get_config(guild_id)
        if config.delivery_channel is None:
            return self._channel_not_set()
        chosen = await self.poll_selection.select_curated()
        return await self._deliver(config, POLL_OF_THE_DAY, poll=chosen)

    async def submit_poll(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        poll = parse_poll_body(argument)
        return await self._submit(self.polls, POLL_MESSAGES, guild_id, poll)

    async def custom_poll(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        config = await self.config_store.get_config(guild_id)
        if config.delivery_channel is None:
            return self._channel_not_set()
        chosen = await self._custom(self.poll_selection, POLL_MESSAGES, guild_id, argument)
        if isinstance(chosen, CommandResult):
            return chosen
        return await self._deliver(config, POLL_OF_THE_DAY, poll=chosen)

    async def delete_poll(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        return await self._delete(
            self.polls, POLL_MESSAGES, guild_id, argument, lambda poll: poll.prompt
        )

    async def list_polls(self, guild_id: str, argument: Optional[str]) -> CommandResult:
        return await self._listing(
            self.polls,
            POLL_MESSAGES,
            guild_id,
            "Here's a list of all saved custom polls",
            lambda poll: poll.prompt,
        )
