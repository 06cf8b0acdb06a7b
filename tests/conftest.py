"""
Pytest configuration and fixtures.

Repository tests run against an in-memory SQLite database through aiosqlite;
each test gets a fresh schema.
"""

import logging
import os
import random
import sys
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(os.path.dirname(__file__))))

from config import get_config
from tests.fixtures import CHANNEL_A, GUILD_A, ROLE_A, FakeGuildDirectory, create_test_engine
from utils.command_router import CommandRouter
from utils.repositories.content_repository import PollRepository, QuestionRepository
from utils.repositories.guild_config_repository import GuildConfigRepository
from utils.sqlalchemy_db import create_session_maker


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """
    Reset environment variables and cached config between tests.
    """
    original_env = dict(os.environ)
    get_config.cache_clear()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """
    Reset logging configuration between tests.
    """
    original_level = logging.getLogger().level
    original_handlers = logging.getLogger().handlers[:]

    yield

    logging.getLogger().setLevel(original_level)
    logging.getLogger().handlers = original_handlers


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = await create_test_engine()
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
def guild_configs(session_maker) -> GuildConfigRepository:
    return GuildConfigRepository(session_maker)


@pytest.fixture
def questions(session_maker) -> QuestionRepository:
    return QuestionRepository(session_maker, rng=random.Random(1234))


@pytest.fixture
def polls(session_maker) -> PollRepository:
    return PollRepository(session_maker, rng=random.Random(1234))


@pytest.fixture
def directory() -> FakeGuildDirectory:
    directory = FakeGuildDirectory()
    directory.add_channel(GUILD_A, CHANNEL_A)
    directory.add_role(GUILD_A, ROLE_A)
    return directory


@pytest.fixture
def router(guild_configs, questions, polls, directory) -> CommandRouter:
    return CommandRouter(guild_configs, questions, polls, directory, prefix="q!")
