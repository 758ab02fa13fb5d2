"""
unMute Backend: Flaggable Mixin
================================

What:  The moderation state shared by posts and comments.
How:   Two columns, `is_flagged` and `flagged_at`, changed only through
       flag() / unflag() so they always move together.

Invariant:
    flagged_at IS NOT NULL  <=>  is_flagged IS TRUE
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import TIMESTAMP, Boolean, text
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FlaggableMixin:
    """Columns and transitions for user-reported content."""

    is_flagged: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        comment="Set when a user reports the content for moderator review",
    )

    flagged_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        default=None,
        comment="When the content was flagged; NULL whenever is_flagged is false",
    )

    def flag(self, when: Optional[datetime] = None) -> None:
        # Re-flagging refreshes the timestamp so the item moves to the top
        # of the moderation queue
        self.is_flagged = True
        self.flagged_at = when or utcnow()

    def unflag(self) -> None:
        self.is_flagged = False
        self.flagged_at = None
