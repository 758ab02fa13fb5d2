"""
unMute Backend: Admin Moderation Service
==========================================

What:  The moderation queue and user management behind /admin.
Who:   Called by routes/admin.py; every route there requires an admin
       principal, so this service does no permission checks of its own
       beyond the self-deletion guard.

Moderation queue:
    Flagged posts and comments, newest flag first, at most 200 each.
    Authors without a username (or deleted authors) show as "Anonymous".
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import ValidationError
from unmute.models.post import Comment, Post
from unmute.models.user import User
from unmute.schemas.post import FlaggedCommentOut, PostOut
from unmute.schemas.resource import AdminToggleResult, AdminUserOut
from unmute.security import Principal
from unmute.services.comment_service import comment_service
from unmute.services.post_service import (
    display_title,
    feed_query,
    post_service,
    to_post_out,
)
from unmute.services.user_service import user_service

logger = logging.getLogger(__name__)

QUEUE_LIMIT = 200
ANONYMOUS = "Anonymous"


class AdminService:
    """
    Responsibilities:
        - flagged_posts() / flagged_comments(): the moderation queue
        - delete_post() / delete_comment() / unflag_post() / unflag_comment()
        - list_users() / delete_user() / toggle_admin()
    """

    # ── Moderation queue ──────────────────────────────────────────────────

    async def flagged_posts(self, db: AsyncSession, admin: Principal) -> List[PostOut]:
        result = await db.execute(
            feed_query()
            .where(Post.is_flagged.is_(True))
            .order_by(Post.flagged_at.desc(), Post.post_id.desc())
            .limit(QUEUE_LIMIT)
        )
        items = []
        for post, username, like_count, comment_count in result.all():
            out = to_post_out(post, username, admin, like_count, comment_count)
            out.username = out.username or ANONYMOUS
            items.append(out)
        return items

    async def flagged_comments(self, db: AsyncSession) -> List[FlaggedCommentOut]:
        result = await db.execute(
            select(Comment, User.username, Post.title, Post.content)
            .outerjoin(User, User.id == Comment.user_id)
            .outerjoin(Post, Post.post_id == Comment.post_id)
            .where(Comment.is_flagged.is_(True))
            .order_by(Comment.flagged_at.desc(), Comment.comment_id.desc())
            .limit(QUEUE_LIMIT)
        )
        return [
            FlaggedCommentOut(
                comment_id=comment.comment_id,
                post_id=comment.post_id,
                user_id=comment.user_id,
                username=username or ANONYMOUS,
                content=comment.content,
                is_flagged=True,
                flagged_at=comment.flagged_at,
                created_at=comment.created_at,
                post_title=display_title(post_title, post_content, comment.post_id),
            )
            for comment, username, post_title, post_content in result.all()
        ]

    async def delete_post(self, db: AsyncSession, admin: Principal, post_id: int) -> None:
        await post_service.delete_post(db, admin, post_id)

    async def delete_comment(self, db: AsyncSession, admin: Principal, comment_id: int) -> None:
        comment = await comment_service.get_comment_or_404(db, comment_id)
        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by admin %s", comment_id, admin.id)

    async def unflag_post(self, db: AsyncSession, admin: Principal, post_id: int) -> None:
        post = await post_service.get_post_or_404(db, post_id)
        post.unflag()
        await db.flush()
        logger.info("Post %s unflagged by admin %s", post_id, admin.id)

    async def unflag_comment(self, db: AsyncSession, admin: Principal, comment_id: int) -> None:
        comment = await comment_service.get_comment_or_404(db, comment_id)
        comment.unflag()
        await db.flush()
        logger.info("Comment %s unflagged by admin %s", comment_id, admin.id)

    # ── Users ─────────────────────────────────────────────────────────────

    async def list_users(self, db: AsyncSession) -> List[AdminUserOut]:
        result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return [
            AdminUserOut(
                user_id=user.id,
                username=user.username,
                email=user.email,
                profile_picture=f"/files/{user.profile_picture}" if user.profile_picture else None,
                is_admin=bool(user.is_admin),
            )
            for user in result.scalars().all()
        ]

    async def delete_user(self, db: AsyncSession, admin: Principal, user_id: int) -> None:
        if user_id == admin.id:
            raise ValidationError(message="Cannot delete your own account")
        user = await user_service.get_user_or_404(db, user_id)
        await user_service.purge_user(db, user)
        logger.info("User %s deleted by admin %s", user_id, admin.id)

    async def toggle_admin(
        self, db: AsyncSession, admin: Principal, user_id: int
    ) -> AdminToggleResult:
        """Flip is_admin. Takes effect on the user's next login."""
        user = await user_service.get_user_or_404(db, user_id)
        user.is_admin = not user.is_admin
        await db.flush()
        logger.info(
            "Admin %s set is_admin=%s for user %s", admin.id, user.is_admin, user_id
        )
        return AdminToggleResult(user_id=user.id, is_admin=bool(user.is_admin))


admin_service = AdminService()
