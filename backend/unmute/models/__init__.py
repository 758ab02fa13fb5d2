"""
unMute Backend: ORM Models Package
===================================

Importing this package registers every table with `Base.metadata`, which is
what Alembic autogenerate and the test fixtures rely on.
"""

from unmute.models.user import User
from unmute.models.post import Comment, Post, PostLike
from unmute.models.journal import JournalEntry, MoodCheckIn, MOOD_LABELS
from unmute.models.resource import Resource

__all__ = [
    "User",
    "Post",
    "PostLike",
    "Comment",
    "JournalEntry",
    "MoodCheckIn",
    "MOOD_LABELS",
    "Resource",
]
