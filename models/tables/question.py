"""SQLAlchemy models for questions and custom_questions tables."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Question(Base):
    """Model for questions table.

    Curated questions shared by every guild. Only rows with ``in_use`` set
    are eligible for random selection.
    """

    __tablename__ = "questions"
    __table_args__ = {"sqlite_autoincrement": True}

    question_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    question_string: Mapped[str] = mapped_column(String, nullable=False)
    in_use: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class CustomQuestion(Base):
    """Model for custom_questions table.

    Questions submitted by a guild. Ids are unique across all guilds.
    """

    __tablename__ = "custom_questions"
    __table_args__ = {"sqlite_autoincrement": True}

    question_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    guild_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    question_string: Mapped[str] = mapped_column(String, nullable=False)
