"""Selection of the item to deliver for a command."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from models.domain import ContentId
from utils.repositories.content_repository import ContentRepository

ItemT = TypeVar("ItemT")


class SelectionOutcome(str, Enum):
    FOUND = "found"
    # An id was requested and no item with that id is visible to the guild
    NOT_FOUND = "not_found"
    # No id was requested and the guild has no custom items
    NO_CUSTOM_CONTENT = "no_custom_content"


@dataclass(frozen=True)
class Selection(Generic[ItemT]):
    outcome: SelectionOutcome
    item: ItemT | None = None

    @property
    def found(self) -> bool:
        return self.outcome is SelectionOutcome.FOUND


class SelectionEngine(Generic[ItemT]):
    """Resolves which curated or custom item a request refers to.

    Holds no state of its own; every call goes straight to the repository.
    """

    def __init__(self, repository: ContentRepository[ItemT]) -> None:
        self.repository = repository

    async def select_custom(
        self, guild_id: str, item_id: ContentId | None = None
    ) -> Selection[ItemT]:
        """Pick a custom item for a guild.

        Args:
            guild_id: The requesting guild.
            item_id: A specific item id, already validated as a positive
                integer, or None for a random pick.

        Returns:
            The selection and how it was resolved.
        """
        if item_id is not None:
            item = await self.repository.get_custom_by_id(guild_id, item_id)
            if item is None:
                return Selection(SelectionOutcome.NOT_FOUND)
            return Selection(SelectionOutcome.FOUND, item)

        item = await self.repository.random_custom(guild_id)
        if item is None:
            return Selection(SelectionOutcome.NO_CUSTOM_CONTENT)
        return Selection(SelectionOutcome.FOUND, item)

    async def select_curated(self) -> ItemT:
        """Pick a random curated item.

        Raises:
            EmptyPoolError: If the curated pool has no active items. There is
                no fallback to custom content.
        """
        return await self.repository.random_curated()
