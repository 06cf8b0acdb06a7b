"""Plain value types passed between the repositories and the command layer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, TypeAlias


class MentionKind(str, Enum):
    NONE = "none"
    EVERYONE = "everyone"
    ROLE = "role"


@dataclass(frozen=True)
class MentionPolicy:
    """Who gets pinged when a question or poll is delivered.

    Use the ``none``, ``everyone`` and ``role`` constructors rather than
    building instances directly; ``role_id`` is only set for ``ROLE``.
    """

    kind: MentionKind = MentionKind.NONE
    role_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is MentionKind.ROLE and not self.role_id:
            raise ValueError("A role mention policy needs a role id")
        if self.kind is not MentionKind.ROLE and self.role_id is not None:
            raise ValueError(f"{self.kind.value} mention policy takes no role id")

    @classmethod
    def none(cls) -> "MentionPolicy":
        return cls(MentionKind.NONE)

    @classmethod
    def everyone(cls) -> "MentionPolicy":
        return cls(MentionKind.EVERYONE)

    @classmethod
    def role(cls, role_id: str) -> "MentionPolicy":
        return cls(MentionKind.ROLE, str(role_id))


class PollItem(NamedTuple):
    """A poll body: the prompt followed by its two options."""

    prompt: str
    option_a: str
    option_b: str


ContentId: TypeAlias = int


class DeletionOutcome(str, Enum):
    """Result of deleting a custom item.

    A missing id and an id owned by another guild both report
    ``NOT_FOUND_OR_NOT_OWNED``.
    """

    DELETED = "deleted"
    NOT_FOUND_OR_NOT_OWNED = "not_found_or_not_owned"


@dataclass(frozen=True)
class GuildConfig:
    """Every per-guild setting in one value."""

    guild_id: str
    delivery_channel: str | None = None
    mention_policy: MentionPolicy = field(default_factory=MentionPolicy.none)
