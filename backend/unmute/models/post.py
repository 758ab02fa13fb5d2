"""
unMute Backend: Post, Like and Comment Models
==============================================

What:  ORM models for the community feed: `PublicPosts`, `PostLikes`,
       `comments`.
Who:   Used by the post, comment and admin services.

Deletion:
    No relationship cascades are declared. Services delete likes and
    comments with explicit statements before deleting a post, so behaviour
    does not depend on the database enforcing ON DELETE.

Query Patterns:
    - Public feed: ORDER BY created_at DESC LIMIT 100 → idx_posts_created_at
    - Moderation queue: WHERE is_flagged ORDER BY flagged_at DESC
    - Comments of a post: WHERE post_id = :id ORDER BY created_at
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from unmute.database import Base
from unmute.models.flagging import FlaggableMixin, utcnow


class Post(FlaggableMixin, Base):
    """
    A community post.

    Anonymous posts still store user_id so the author can delete them;
    the API hides the author from everyone else.
    """

    __tablename__ = "PublicPosts"

    post_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.user_id"),
        nullable=True,
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_anonymous: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
        Index("idx_posts_flagged", "is_flagged"),
    )

    def __repr__(self) -> str:
        return f"<Post(post_id={self.post_id}, user_id={self.user_id}, flagged={self.is_flagged})>"


class PostLike(Base):
    """One user's like on one post. Liking twice toggles the like off."""

    __tablename__ = "PostLikes"

    like_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("PublicPosts.post_id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.user_id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),
    )


class Comment(FlaggableMixin, Base):
    """A reply on a post. user_id is NULL for comments left without a token."""

    __tablename__ = "comments"

    comment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("PublicPosts.post_id"), nullable=False
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.user_id"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_comments_post_id", "post_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment(comment_id={self.comment_id}, post_id={self.post_id})>"
