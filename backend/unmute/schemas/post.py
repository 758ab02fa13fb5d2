"""
unMute Backend: Post, Like and Comment Schemas
===============================================
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class PostCreateRequest(BaseModel):
    title: Optional[str] = None
    topic: Optional[str] = None
    content: Optional[str] = None
    is_anonymous: bool = False


class PostOut(BaseModel):
    """
    A post as the feed renders it.

    `title` is never empty: rows without a stored title fall back to the
    first line of their content. For anonymous posts `user_id` and
    `username` are null unless the viewer is the author or an admin.
    """
    post_id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    title: str
    content: str
    topic: str
    is_anonymous: bool
    is_flagged: bool
    flagged_at: Optional[datetime] = None
    created_at: datetime
    like_count: int = 0
    comment_count: int = 0


class LikeToggleResult(BaseModel):
    action: Literal["liked", "unliked"]
    like_id: Optional[int] = None
    like_count: int


class LikeSummary(BaseModel):
    count: int
    liked_by_user: bool


class LikerOut(BaseModel):
    user_id: int
    username: Optional[str] = None
    created_at: datetime


class CommentCreateRequest(BaseModel):
    content: Optional[str] = None


class CommentOut(BaseModel):
    comment_id: int
    post_id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    content: str
    is_flagged: bool
    flagged_at: Optional[datetime] = None
    created_at: datetime


class FlaggedCommentOut(CommentOut):
    post_title: str = Field(description="Title of the post the comment belongs to")
