"""SQLAlchemy database connection and session management."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from config import BotConfig
from models.base import Base


def create_engine_from_config(config: BotConfig) -> AsyncEngine:
    """Create the async engine for the configured database URL.

    SQLite URLs get a single shared connection so in-memory databases
    survive across sessions; anything else gets a bounded pool.
    """
    if config.database_url.startswith("sqlite"):
        return create_async_engine(
            config.database_url,
            echo=config.db_echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        config.database_url,
        echo=config.db_echo,
        pool_size=config.db_pool_size,  # Maximum number of connections
        max_overflow=0,
        pool_timeout=30,  # Seconds to wait before giving up on getting a connection from the pool
        pool_recycle=300,  # Recycle connections after 5 minutes
        pool_pre_ping=True,  # Check connection validity before using it
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to ``engine``."""
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    # Register every table on Base.metadata
    import models.tables  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
