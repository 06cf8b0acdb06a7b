"""SQLAlchemy model for ping_roles table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class PingRole(Base):
    """Model for ping_roles table.

    ``ping_role`` is stored as ``"0"`` (no ping), ``"1"`` (everyone) or
    ``"role:<id>"`` for the role to mention. Older rows may hold the bare id.
    """

    __tablename__ = "ping_roles"

    # Primary key
    guild_id: Mapped[str] = mapped_column(String, primary_key=True, nullable=False)

    ping_role: Mapped[str] = mapped_column(String, nullable=False)
