"""
unMute Backend: Resource Model
===============================

Curated help material (hotlines, articles, guides). Written by admins,
readable by anyone.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from unmute.database import Base
from unmute.models.flagging import utcnow


class Resource(Base):
    __tablename__ = "Resources"

    resource_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Resource(resource_id={self.resource_id}, title='{self.title}')>"
