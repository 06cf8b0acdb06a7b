import asyncio
import logging
from collections.abc import Sequence

import discord
from discord.ext import commands
from sqlalchemy.ext.asyncio import AsyncEngine

from config import BotConfig, get_config
from utils.command_router import CommandRouter
from utils.error_handling import handle_global_command_error
from utils.guild_directory import DiscordGuildDirectory
from utils.logging import init_logging
from utils.repositories import register_repositories
from utils.service_container import ServiceContainer
from utils.sqlalchemy_db import create_engine_from_config, create_session_maker, init_models

INITIAL_EXTENSIONS = ["cogs.qotd"]


class QotdBot(commands.Bot):
    def __init__(
            self,
            *args,
            config: BotConfig,
            engine: AsyncEngine,
            initial_extensions: Sequence[str] = INITIAL_EXTENSIONS,
            **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.config = config
        self.engine = engine
        self.initial_extensions = initial_extensions
        self.session_maker = create_session_maker(engine)

        # Initialize service container
        self.container = ServiceContainer()
        self.register_services()

    def register_services(self) -> None:
        """Register the shared services cogs look up."""
        self.container.register("bot", self)
        self.container.register("config", self.config)
        self.container.register("session_maker", self.session_maker)
        register_repositories(
            self.container,
            self.session_maker,
            custom_content_limit=self.config.custom_content_limit,
        )
        self.container.register_factory(
            "command_router",
            lambda: CommandRouter(
                self.container.get("repository.guild_config"),
                self.container.get("repository.question"),
                self.container.get("repository.poll"),
                DiscordGuildDirectory(self),
                prefix=self.config.command_prefix,
            ),
            singleton=True,
        )

    async def setup_hook(self) -> None:
        await init_models(self.engine)
        logging.info("Database tables ready")
        await self.load_extensions()

    async def load_extensions(self):
        for extension in self.initial_extensions:
            try:
                await self.load_extension(extension)
            except commands.ExtensionError as e:
                logging.exception(f"Failed to load cog {extension} - {e}")
                raise

    async def on_ready(self):
        logging.info(f"Logged in as {self.user.name} (ID: {self.user.id})")

    async def on_command_error(self, ctx: commands.Context, error: Exception):
        """Global error handler for command errors."""
        await handle_global_command_error(ctx, error)

    async def close(self) -> None:
        await super().close()
        await self.engine.dispose()


async def main():
    config = get_config()
    logger = init_logging(config)
    logger.info("Logging started...", config=config.safe_dump())

    engine = create_engine_from_config(config)

    intents = discord.Intents.default()
    intents.message_content = True
    async with QotdBot(
            commands.when_mentioned_or(config.command_prefix),
            config=config,
            engine=engine,
            intents=intents,
            case_insensitive=True,
            help_command=None,
    ) as bot:
        await bot.start(config.bot_token)


if __name__ == "__main__":
    asyncio.run(main())
