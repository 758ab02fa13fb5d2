"""
unMute Backend: Comment Service
================================

What:  Listing, creating, deleting and flagging comments under a post.
Who:   Called by routes/comments.py; the admin service reuses
       get_comment_or_404().

Comments may be left without a token; those rows carry user_id NULL and
can only be deleted by an admin.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from unmute.models.post import Comment
from unmute.models.user import User
from unmute.schemas.post import CommentCreateRequest, CommentOut
from unmute.security import Principal
from unmute.services.post_service import post_service

logger = logging.getLogger(__name__)

COMMENT_MAX = 1000


def to_comment_out(comment: Comment, username: Optional[str]) -> CommentOut:
    return CommentOut(
        comment_id=comment.comment_id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        username=username,
        content=comment.content,
        is_flagged=bool(comment.is_flagged),
        flagged_at=comment.flagged_at,
        created_at=comment.created_at,
    )


class CommentService:

    async def get_comment_or_404(
        self, db: AsyncSession, comment_id: int, post_id: Optional[int] = None
    ) -> Comment:
        comment = await db.get(Comment, comment_id)
        # A comment addressed through the wrong post is treated as missing
        if comment is None or (post_id is not None and comment.post_id != post_id):
            raise NotFoundError(resource="Comment", resource_id=comment_id)
        return comment

    async def list_for_post(self, db: AsyncSession, post_id: int) -> List[CommentOut]:
        await post_service.get_post_or_404(db, post_id)
        result = await db.execute(
            select(Comment, User.username)
            .outerjoin(User, User.id == Comment.user_id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.comment_id.asc())
        )
        return [to_comment_out(comment, username) for comment, username in result.all()]

    async def create_comment(
        self,
        db: AsyncSession,
        post_id: int,
        payload: CommentCreateRequest,
        principal: Optional[Principal] = None,
    ) -> CommentOut:
        content = (payload.content or "").strip()
        if not content:
            raise ValidationError(message="Content is required", field="content")

        await post_service.get_post_or_404(db, post_id)

        comment = Comment(
            post_id=post_id,
            user_id=principal.id if principal else None,
            content=content[:COMMENT_MAX],
        )
        db.add(comment)
        await db.flush()

        username = None
        if principal is not None:
            author = await db.get(User, principal.id)
            username = author.username if author else None

        logger.info("Comment %s added to post %s", comment.comment_id, post_id)
        return to_comment_out(comment, username)

    async def delete_comment(
        self, db: AsyncSession, principal: Principal, post_id: int, comment_id: int
    ) -> None:
        comment = await self.get_comment_or_404(db, comment_id, post_id=post_id)
        if not principal.can_modify(comment.user_id):
            raise PermissionDeniedError()

        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by user %s", comment_id, principal.id)

    async def flag_comment(
        self, db: AsyncSession, principal: Principal, post_id: int, comment_id: int
    ) -> None:
        comment = await self.get_comment_or_404(db, comment_id, post_id=post_id)
        comment.flag()
        await db.flush()
        logger.info("Comment %s flagged by user %s", comment_id, principal.id)


comment_service = CommentService()
