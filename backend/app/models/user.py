"""User model: profile of an authenticated player or administrator."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

ADMIN_ROLE = "admin"


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Profile record for an identity issued by the identity provider."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    role: Mapped[str] = mapped_column(String(50), default="member", nullable=False)  # member, admin

    @property
    def is_admin(self) -> bool:
        """Privileged actors may view and mutate every booking."""
        return self.role == ADMIN_ROLE

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
