"""
unMute Backend: Post Service
=============================

What:  The community feed: listing, creating, liking, flagging and deleting
       posts.
How:   Parameterized SQLAlchemy queries; rows are shaped into PostOut with
       a display title, normalized topic and like/comment counts.
Who:   Called by routes/posts.py and, for moderation, by the admin service.

Display rules (shared with the admin moderation queue):
    title   stored title stripped → first non-blank content line (≤255)
            → "Post {id}"
    topic   trimmed, inner whitespace collapsed → "Other" when empty or the
            literal string "NULL" left behind by old imports
    author  anonymous posts hide user_id/username unless the viewer is the
            author or an admin
"""

import logging
import re
from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from unmute.models.post import Comment, Post, PostLike
from unmute.models.user import User
from unmute.schemas.post import (
    LikerOut,
    LikeSummary,
    LikeToggleResult,
    PostCreateRequest,
    PostOut,
)
from unmute.security import Principal

logger = logging.getLogger(__name__)

FEED_LIMIT = 100
LIKERS_LIMIT = 100
TITLE_MAX = 255
TOPIC_MAX = 100
DEFAULT_TOPIC = "Other"

_WHITESPACE = re.compile(r"\s+")


def display_title(title: Optional[str], content: Optional[str], post_id: int) -> str:
    if title and title.strip():
        return title.strip()
    for line in (content or "").splitlines():
        if line.strip():
            return line.strip()[:TITLE_MAX]
    return f"Post {post_id}"


def normalize_topic(topic: Optional[str]) -> str:
    if topic is None:
        return DEFAULT_TOPIC
    cleaned = _WHITESPACE.sub(" ", topic.strip())
    if not cleaned or cleaned.upper() == "NULL":
        return DEFAULT_TOPIC
    return cleaned


def _like_count_subquery():
    return (
        select(func.count(PostLike.like_id))
        .where(PostLike.post_id == Post.post_id)
        .correlate(Post)
        .scalar_subquery()
    )


def _comment_count_subquery():
    return (
        select(func.count(Comment.comment_id))
        .where(Comment.post_id == Post.post_id)
        .correlate(Post)
        .scalar_subquery()
    )


def feed_query():
    return (
        select(
            Post,
            User.username,
            _like_count_subquery().label("like_count"),
            _comment_count_subquery().label("comment_count"),
        )
        .outerjoin(User, User.id == Post.user_id)
    )


def to_post_out(
    post: Post,
    username: Optional[str],
    viewer: Optional[Principal],
    like_count: int = 0,
    comment_count: int = 0,
) -> PostOut:
    user_id = post.user_id
    if post.is_anonymous and not (viewer and viewer.can_modify(post.user_id)):
        user_id = None
        username = None

    return PostOut(
        post_id=post.post_id,
        user_id=user_id,
        username=username or None,
        title=display_title(post.title, post.content, post.post_id),
        content=post.content,
        topic=normalize_topic(post.topic),
        is_anonymous=bool(post.is_anonymous),
        is_flagged=bool(post.is_flagged),
        flagged_at=post.flagged_at,
        created_at=post.created_at,
        like_count=int(like_count or 0),
        comment_count=int(comment_count or 0),
    )


class PostService:
    """
    Business logic for posts and likes.

    Responsibilities:
        - list_public() / get_post(): feed reads
        - create_post(): authenticated author only
        - toggle_like() / like_summary() / list_likers()
        - flag_post(): any authenticated user
        - delete_post(): author or admin; removes likes and comments first
    """

    async def get_post_or_404(self, db: AsyncSession, post_id: int) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        return post

    async def list_public(
        self,
        db: AsyncSession,
        viewer: Optional[Principal] = None,
        topic: Optional[str] = None,
    ) -> List[PostOut]:
        query = feed_query()

        if topic and topic.strip() and topic.strip().lower() != "all":
            wanted = normalize_topic(topic)
            if wanted == DEFAULT_TOPIC:
                query = query.where(
                    or_(
                        Post.topic.is_(None),
                        func.trim(Post.topic) == "",
                        func.upper(func.trim(Post.topic)) == "NULL",
                        func.trim(Post.topic) == DEFAULT_TOPIC,
                    )
                )
            else:
                query = query.where(func.trim(Post.topic) == wanted)

        query = query.order_by(Post.created_at.desc(), Post.post_id.desc()).limit(FEED_LIMIT)
        result = await db.execute(query)

        return [
            to_post_out(post, username, viewer, like_count, comment_count)
            for post, username, like_count, comment_count in result.all()
        ]

    async def get_post(
        self, db: AsyncSession, post_id: int, viewer: Optional[Principal] = None
    ) -> PostOut:
        result = await db.execute(feed_query().where(Post.post_id == post_id).limit(1))
        row = result.first()
        if row is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        post, username, like_count, comment_count = row
        return to_post_out(post, username, viewer, like_count, comment_count)

    async def create_post(
        self, db: AsyncSession, principal: Principal, payload: PostCreateRequest
    ) -> PostOut:
        title = (payload.title or "").strip()
        topic = (payload.topic or "").strip()
        content = (payload.content or "").strip()
        if not title or not topic or not content:
            raise ValidationError(
                message="Missing required fields",
                context={"required": ["title", "topic", "content"]},
            )

        post = Post(
            user_id=principal.id,
            title=title[:TITLE_MAX],
            topic=topic[:TOPIC_MAX],
            content=content,
            is_anonymous=payload.is_anonymous,
        )
        db.add(post)
        await db.flush()
        logger.info("Post %s created by user %s", post.post_id, principal.id)

        author = await db.get(User, principal.id)
        return to_post_out(post, author.username if author else None, principal)

    # ── Likes ─────────────────────────────────────────────────────────────

    async def _count_likes(self, db: AsyncSession, post_id: int) -> int:
        result = await db.execute(
            select(func.count(PostLike.like_id)).where(PostLike.post_id == post_id)
        )
        return int(result.scalar() or 0)

    async def toggle_like(
        self, db: AsyncSession, principal: Principal, post_id: int
    ) -> LikeToggleResult:
        """
        Like the post, or remove the caller's like if one already exists.

        A concurrent like from the same user (double click) can insert
        between our lookup and our insert. The unique (post, user) key then
        rejects ours; that is treated as a second click and the like is
        removed.
        """
        await self.get_post_or_404(db, post_id)

        existing = await self._find_like(db, post_id, principal.id)
        if existing is None:
            like = PostLike(post_id=post_id, user_id=principal.id)
            db.add(like)
            try:
                await db.flush()
            except IntegrityError:
                # Only the failed insert is pending in this request
                await db.rollback()
                logger.info(
                    "Concurrent like on post %s by user %s, toggling off",
                    post_id,
                    principal.id,
                )
                existing = await self._find_like(db, post_id, principal.id)
            else:
                return LikeToggleResult(
                    action="liked",
                    like_id=like.like_id,
                    like_count=await self._count_likes(db, post_id),
                )

        if existing is not None:
            await db.delete(existing)
            await db.flush()
        return LikeToggleResult(
            action="unliked", like_count=await self._count_likes(db, post_id)
        )

    async def _find_like(
        self, db: AsyncSession, post_id: int, user_id: int
    ) -> Optional[PostLike]:
        result = await db.execute(
            select(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def like_summary(
        self, db: AsyncSession, post_id: int, viewer: Optional[Principal] = None
    ) -> LikeSummary:
        await self.get_post_or_404(db, post_id)
        count = await self._count_likes(db, post_id)

        liked_by_user = False
        if viewer is not None:
            result = await db.execute(
                select(PostLike.like_id)
                .where(PostLike.post_id == post_id, PostLike.user_id == viewer.id)
                .limit(1)
            )
            liked_by_user = result.scalar_one_or_none() is not None

        return LikeSummary(count=count, liked_by_user=liked_by_user)

    async def list_likers(self, db: AsyncSession, post_id: int) -> List[LikerOut]:
        await self.get_post_or_404(db, post_id)
        result = await db.execute(
            select(PostLike.user_id, User.username, PostLike.created_at)
            .outerjoin(User, User.id == PostLike.user_id)
            .where(PostLike.post_id == post_id)
            .order_by(PostLike.created_at.desc())
            .limit(LIKERS_LIMIT)
        )
        return [
            LikerOut(user_id=user_id, username=username, created_at=created_at)
            for user_id, username, created_at in result.all()
        ]

    # ── Moderation ────────────────────────────────────────────────────────

    async def flag_post(self, db: AsyncSession, principal: Principal, post_id: int) -> None:
        post = await self.get_post_or_404(db, post_id)
        post.flag()
        await db.flush()
        logger.info("Post %s flagged by user %s", post_id, principal.id)

    async def purge_post(self, db: AsyncSession, post_id: int) -> None:
        """Delete a post together with its likes and comments."""
        await db.execute(
            delete(PostLike)
            .where(PostLike.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            delete(Comment)
            .where(Comment.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            delete(Post)
            .where(Post.post_id == post_id)
            .execution_options(synchronize_session=False)
        )

    async def delete_post(self, db: AsyncSession, principal: Principal, post_id: int) -> None:
        post = await self.get_post_or_404(db, post_id)
        if not principal.can_modify(post.user_id):
            raise PermissionDeniedError()

        # Drop the loaded instance so the session does not try to refresh it
        db.expunge(post)
        await self.purge_post(db, post_id)
        logger.info("Post %s deleted by user %s", post_id, principal.id)


post_service = PostService()
