"""SQLAlchemy model for channels table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class DeliveryChannel(Base):
    """Model for channels table.

    This table stores the channel each guild receives its question or poll
    of the day in. One row per guild.
    """

    __tablename__ = "channels"

    # Primary key
    guild_id: Mapped[str] = mapped_column(String, primary_key=True, nullable=False)

    channel_id: Mapped[str] = mapped_column(String, nullable=False)
