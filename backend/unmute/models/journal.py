"""
unMute Backend: Journal Entry and Mood Check-in Models
========================================================

What:  ORM models for `JournalEntries` and `MoodCheckIns`.
Who:   Used by the journal and mood services.

Entries are private to their owner. A check-in attaches one mood label to
an entry; an entry may collect several, the newest one is "the" mood.
The foreign key from MoodCheckIns to JournalEntries has no ON DELETE rule:
the journal service removes check-ins first, in the same transaction.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from unmute.database import Base
from unmute.models.flagging import utcnow

# Labels offered by the journal UI, in display order
MOOD_LABELS = ("excited", "happy", "indifferent", "sad", "frustrated")


class JournalEntry(Base):
    __tablename__ = "JournalEntries"

    entry_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.user_id"), nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_journal_user_created", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<JournalEntry(entry_id={self.entry_id}, user_id={self.user_id})>"


class MoodCheckIn(Base):
    __tablename__ = "MoodCheckIns"

    checkin_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.user_id"), nullable=False
    )
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("JournalEntries.entry_id"), nullable=False
    )
    mood: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_mood_entry_id", "entry_id"),
    )
