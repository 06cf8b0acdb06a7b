"""Repository package initialization.

This module initializes the repository package and registers all repositories
with the service container.
"""

from utils.repositories.content_repository import (
    CUSTOM_CONTENT_LIMIT,
    PollRepository,
    QuestionRepository,
)
from utils.repositories.guild_config_repository import GuildConfigRepository
from utils.service_container import ServiceContainer


def register_repositories(
    container: ServiceContainer,
    session_maker,
    custom_content_limit: int = CUSTOM_CONTENT_LIMIT,
) -> None:
    """Register all repositories with the service container.

    Args:
        container: The service container to register repositories with.
        session_maker: Session factory shared by every repository.
        custom_content_limit: Maximum custom items per guild and content type.
    """
    container.register_factory(
        "repository.guild_config",
        lambda: GuildConfigRepository(session_maker),
        singleton=True,
    )
    container.register_factory(
        "repository.question",
        lambda: QuestionRepository(session_maker, limit=custom_content_limit),
        singleton=True,
    )
    container.register_factory(
        "repository.poll",
        lambda: PollRepository(session_maker, limit=custom_content_limit),
        singleton=True,
    )
