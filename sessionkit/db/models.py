from __future__ import annotations

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from sessionkit.schemas.enums import UserRole


class Base(DeclarativeBase):
    pass


class User(Base):
    """Account record. Created on signup, never mutated afterwards."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Stored lowercase; the unique index is what settles concurrent signups.
    username: Mapped[str] = mapped_column(String(150), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, values_callable=lambda roles: [r.value for r in roles], name="user_role"),
        default=UserRole.USER,
        nullable=False,
    )
