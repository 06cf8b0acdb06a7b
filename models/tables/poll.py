"""SQLAlchemy models for polls and custom_polls tables."""

from sqlalchemy import ARRAY, JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base

# varchar[] on PostgreSQL, JSON list on SQLite
PollBody = ARRAY(String).with_variant(JSON(), "sqlite")


class Poll(Base):
    """Model for polls table.

    ``poll_string`` holds ``[prompt, option_a, option_b]``.
    """

    __tablename__ = "polls"
    __table_args__ = {"sqlite_autoincrement": True}

    poll_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    poll_string: Mapped[list[str]] = mapped_column(PollBody, nullable=False)
    in_use: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class CustomPoll(Base):
    """Model for custom_polls table."""

    __tablename__ = "custom_polls"
    __table_args__ = {"sqlite_autoincrement": True}

    poll_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    poll_string: Mapped[list[str]] = mapped_column(PollBody, nullable=False)
