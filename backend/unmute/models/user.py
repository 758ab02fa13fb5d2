"""
unMute Backend: User SQLAlchemy Model
======================================

What:  ORM model representing the `users` table.
Who:   Used by the auth, user and admin services.

Column naming:
    The primary key column is `user_id` (every other table references
    users.user_id). The ORM attribute is `id`, which is also the claim name
    inside issued tokens.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, Boolean, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from unmute.database import Base
from unmute.models.flagging import utcnow


class User(Base):
    """A registered account. Admins are regular users with is_admin set."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        "user_id",
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier; unique across users",
    )

    username: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        comment="Optional display name; also accepted as a login identifier",
    )

    # bcrypt hash, never the plain password
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    profile_picture: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Path relative to STORAGE_ROOT",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', is_admin={self.is_admin})>"
