"""
Repository pattern implementation for SQLAlchemy.

This module provides the base class shared by the guild configuration and
content repositories: session handling, translation of driver failures into
the bot's database exceptions, and dialect-aware upserts.
"""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeAlias

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.dml import Insert

from models.base import Base
from utils.exceptions import ConfigurationError, ConnectionError, QueryError

# Type aliases
SessionMaker: TypeAlias = async_sessionmaker[AsyncSession]
ValuesDict: TypeAlias = dict[str, Any]

_INSERT_CONSTRUCTORS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository:
    """Base repository for SQLAlchemy models.

    Every database failure is re-raised as a ``DatabaseError`` subclass so the
    command layer can report it; nothing is retried or replaced with a default.

    Attributes:
        session_maker: Factory used to open a session per operation.
    """

    def __init__(self, session_maker: SessionMaker):
        """Initialize the repository.

        Args:
            session_maker: Factory function to create database sessions.
        """
        self.session_maker = session_maker

    @asynccontextmanager
    async def session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session for one unit of work.

        Args:
            operation: Short name of the operation, used in error messages.

        Raises:
            ConnectionError: If the database could not be reached.
            QueryError: If a statement failed.
        """
        try:
            async with self.session_maker() as session:
                yield session
        except DBAPIError as e:
            if e.connection_invalidated:
                raise ConnectionError(
                    f"Lost database connection during {operation}"
                ) from e
            raise QueryError(query=operation, message=f"Database {operation} failed") from e
        except SQLAlchemyError as e:
            raise QueryError(query=operation, message=f"Database {operation} failed") from e
        except OSError as e:
            raise ConnectionError(f"Could not reach database for {operation}") from e

    @staticmethod
    def upsert_statement(
        session: AsyncSession,
        entity_type: type[Base],
        values: ValuesDict,
        index_elements: Sequence[str],
    ) -> Insert:
        """Build an ``INSERT ... ON CONFLICT DO UPDATE`` for the session's dialect.

        Args:
            session: The session the statement will run on.
            entity_type: The model to upsert into.
            values: Column values for the row.
            index_elements: Columns of the conflicting unique key.

        Returns:
            The upsert statement. The row is replaced in place on conflict.
        """
        dialect = session.get_bind().dialect.name
        try:
            insert = _INSERT_CONSTRUCTORS[dialect]
        except KeyError:
            raise ConfigurationError(f"Upsert is not supported on {dialect}") from None

        stmt = insert(entity_type).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(index_elements),
            set_={
                column: stmt.excluded[column]
                for column in values
                if column not in index_elements
            },
        )
