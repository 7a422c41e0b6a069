"""Coach model: lightweight, provisioned lazily from bookings."""

from datetime import datetime

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Coach(Base):
    """A coach that can be paired with a court booking."""

    __tablename__ = "coaches"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    def __repr__(self) -> str:
        return f"<Coach(id={self.id!r}, name={self.name!r})>"
