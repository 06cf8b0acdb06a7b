"""Repositories for curated and guild-submitted questions and polls."""

import logging
import random
from collections.abc import Sequence
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from models.base import Base
from models.domain import ContentId, DeletionOutcome, PollItem
from models.tables.poll import CustomPoll, Poll
from models.tables.question import CustomQuestion, Question
from utils.exceptions import CapacityExceededError, EmptyPoolError, ValidationError
from utils.repository import BaseRepository

# Maximum custom items per guild, per content type
CUSTOM_CONTENT_LIMIT = 100

ItemT = TypeVar("ItemT")


class ContentRepository(BaseRepository, Generic[ItemT]):
    """Curated pool plus per-guild custom pool for one kind of content.

    Subclasses bind the table columns and convert between stored values and
    items. Every custom-pool query is filtered by the owning guild, so a guild
    can never read, list or delete another guild's items.

    The soft capacity check in ``submit_custom`` reads the count and inserts
    in one session but not in one transaction; two concurrent submissions
    from the same guild may both pass at ``limit - 1``.
    """

    content_type: ClassVar[str]

    curated_model: ClassVar[type[Base]]
    curated_id: ClassVar[InstrumentedAttribute]
    curated_body: ClassVar[InstrumentedAttribute]
    curated_active: ClassVar[InstrumentedAttribute]

    custom_model: ClassVar[type[Base]]
    custom_id: ClassVar[InstrumentedAttribute]
    custom_owner: ClassVar[InstrumentedAttribute]
    custom_body: ClassVar[InstrumentedAttribute]

    def __init__(
        self,
        session_maker,
        limit: int = CUSTOM_CONTENT_LIMIT,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            session_maker: Factory function to create database sessions.
            limit: Maximum number of custom items per guild.
            rng: Random source for selections. Pass a seeded ``random.Random``
                for reproducible picks.
        """
        super().__init__(session_maker)
        self.limit = limit
        self.rng = rng or random.Random()
        self.logger = logging.getLogger(__name__)

    def to_row(self, item: ItemT) -> Any:
        """Convert an item to its stored value, validating its shape."""
        raise NotImplementedError

    def from_row(self, value: Any) -> ItemT:
        """Convert a stored value back into an item."""
        raise NotImplementedError

    def _choose(self, rows: Sequence[Any]) -> Any | None:
        if not rows:
            return None
        return self.rng.choice(rows)

    async def _count(self, session: AsyncSession, guild_id: str) -> int:
        result = await session.execute(
            select(func.count())
            .select_from(self.custom_model)
            .where(self.custom_owner == str(guild_id))
        )
        return result.scalar_one()

    async def random_curated(self) -> ItemT:
        """Pick a random active item from the curated pool.

        Returns:
            The selected item.

        Raises:
            EmptyPoolError: If the curated pool has no active items.
        """
        async with self.session("random_curated") as session:
            result = await session.execute(
                select(self.curated_body)
                .where(self.curated_active.is_(True))
                .order_by(self.curated_id)
            )
            bodies = result.scalars().all()

        body = self._choose(bodies)
        if body is None:
            raise EmptyPoolError(self.content_type)
        return self.from_row(body)

    async def submit_custom(self, guild_id: str, item: ItemT) -> ContentId:
        """Add an item to a guild's custom pool.

        Args:
            guild_id: The Discord guild ID of the submitting guild.
            item: The item to store.

        Returns:
            The id assigned to the new item.

        Raises:
            ValidationError: If the item has the wrong shape.
            CapacityExceededError: If the guild already holds ``limit`` items.
        """
        value = self.to_row(item)

        async with self.session("submit_custom") as session:
            if await self._count(session, guild_id) >= self.limit:
                raise CapacityExceededError(self.content_type, self.limit)

            entry = self.custom_model(
                **{self.custom_owner.key: str(guild_id), self.custom_body.key: value}
            )
            session.add(entry)
            await session.flush()
            new_id = getattr(entry, self.custom_id.key)
            await session.commit()

        self.logger.info(f"Created custom {self.content_type} {new_id} for guild {guild_id}")
        return new_id

    async def delete_custom(self, guild_id: str, item_id: ContentId) -> DeletionOutcome:
        """Delete one of a guild's custom items.

        The ownership check and the delete are a single statement.

        Args:
            guild_id: The Discord guild ID of the requesting guild.
            item_id: The id of the item to delete.

        Returns:
            ``DELETED``, or ``NOT_FOUND_OR_NOT_OWNED`` whether the id is
            missing or belongs to another guild.
        """
        async with self.session("delete_custom") as session:
            result = await session.execute(
                delete(self.custom_model).where(
                    self.custom_id == item_id,
                    self.custom_owner == str(guild_id),
                )
            )
            await session.commit()

        if result.rowcount > 0:
            self.logger.info(f"Deleted custom {self.content_type} {item_id} for guild {guild_id}")
            return DeletionOutcome.DELETED
        return DeletionOutcome.NOT_FOUND_OR_NOT_OWNED

    async def list_custom(self, guild_id: str) -> list[tuple[ContentId, ItemT]]:
        """List a guild's custom items ordered by id.

        Returns:
            ``(id, item)`` pairs; empty if the guild has none.
        """
        async with self.session("list_custom") as session:
            result = await session.execute(
                select(self.custom_id, self.custom_body)
                .where(self.custom_owner == str(guild_id))
                .order_by(self.custom_id)
            )
            rows = result.all()
        return [(item_id, self.from_row(body)) for item_id, body in rows]

    async def random_custom(self, guild_id: str) -> ItemT | None:
        """Pick a random item from a guild's custom pool, or None if it is empty."""
        async with self.session("random_custom") as session:
            result = await session.execute(
                select(self.custom_body)
                .where(self.custom_owner == str(guild_id))
                .order_by(self.custom_id)
            )
            bodies = result.scalars().all()

        body = self._choose(bodies)
        return None if body is None else self.from_row(body)

    async def get_custom_by_id(self, guild_id: str, item_id: ContentId) -> ItemT | None:
        """Get one of a guild's custom items.

        Returns:
            The item, or None if the id is missing or owned by another guild.
        """
        async with self.session("get_custom_by_id") as session:
            result = await session.execute(
                select(self.custom_body).where(
                    self.custom_id == item_id,
                    self.custom_owner == str(guild_id),
                )
            )
            body = result.scalar_one_or_none()
        return None if body is None else self.from_row(body)

    async def count_custom(self, guild_id: str) -> int:
        """Count a guild's custom items."""
        async with self.session("count_custom") as session:
            return await self._count(session, guild_id)

    async def add_curated(self, items: Sequence[ItemT]) -> int:
        """Add active items to the curated pool.

        Every item is validated before anything is written.

        Returns:
            The number of items added.
        """
        values = [self.to_row(item) for item in items]
        if not values:
            return 0

        async with self.session("add_curated") as session:
            session.add_all(
                self.curated_model(
                    **{self.curated_body.key: value, self.curated_active.key: True}
                )
                for value in values
            )
            await session.commit()

        self.logger.info(f"Added {len(values)} curated {self.content_type} items")
        return len(values)

    async def retire_curated(self) -> int:
        """Mark every curated item inactive; rows are kept.

        Returns:
            The number of items retired.
        """
        async with self.session("retire_curated") as session:
            result = await session.execute(
                update(self.curated_model)
                .where(self.curated_active.is_(True))
                .values({self.curated_active.key: False})
            )
            await session.commit()

        self.logger.info(f"Retired {result.rowcount} curated {self.content_type} items")
        return result.rowcount

    async def count_curated(self) -> int:
        """Count active curated items."""
        async with self.session("count_curated") as session:
            result = await session.execute(
                select(func.count())
                .select_from(self.curated_model)
                .where(self.curated_active.is_(True))
            )
            return result.scalar_one()


class QuestionRepository(ContentRepository[str]):
    """Questions of the day."""

    content_type = "question"

    curated_model = Question
    curated_id = Question.question_id
    curated_body = Question.question_string
    curated_active = Question.in_use

    custom_model = CustomQuestion
    custom_id = CustomQuestion.question_id
    custom_owner = CustomQuestion.guild_id
    custom_body = CustomQuestion.question_string

    def to_row(self, item: str) -> str:
        if not isinstance(item, str) or not item.strip():
            raise ValidationError("question", "A question cannot be empty")
        return item

    def from_row(self, value: str) -> str:
        return value


class PollRepository(ContentRepository[PollItem]):
    """Polls of the day: a prompt and two options."""

    content_type = "poll"

    curated_model = Poll
    curated_id = Poll.poll_id
    curated_body = Poll.poll_string
    curated_active = Poll.in_use

    custom_model = CustomPoll
    custom_id = CustomPoll.poll_id
    custom_owner = CustomPoll.guild_id
    custom_body = CustomPoll.poll_string

    def to_row(self, item: PollItem) -> list[str]:
        parts = list(item) if isinstance(item, (tuple, list)) else []
        if len(parts) != 3 or not all(isinstance(p, str) and p.strip() for p in parts):
            raise ValidationError(
                "poll", "A poll needs a prompt and exactly two options"
            )
        return parts

    def from_row(self, value: Sequence[str]) -> PollItem:
        return PollItem(*value)
