"""
unMute Backend: User Profile Service
=====================================

What:  The account page: profile read/update, password change, account
       deletion and profile picture upload.
Who:   Called by routes/users.py; purge_user() is shared with the admin
       service.

Account deletion removes, in order:
    likes (given by the user or on their posts)
    comments (written by the user or on their posts)
    mood check-ins (by the user or on their entries)
    journal entries, posts, and finally the user row
The stored profile picture is removed from disk after the rows are gone.
"""

import logging
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import ConflictError, NotFoundError, ValidationError
from unmute.models.journal import JournalEntry, MoodCheckIn
from unmute.models.post import Comment, Post, PostLike
from unmute.models.user import User
from unmute.schemas.auth import (
    AccountDeleteRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    UserOut,
)
from unmute.security import Principal, hash_password, verify_password
from unmute.services.auth_service import (
    auth_service,
    normalize_username,
    to_user_out,
    validate_email,
    validate_password,
)
from unmute.services.file_service import file_service

logger = logging.getLogger(__name__)


def _bulk_delete(model, *criteria):
    return delete(model).where(*criteria).execution_options(synchronize_session=False)


class UserService:

    async def get_user_or_404(self, db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return user

    async def get_profile(self, db: AsyncSession, principal: Principal) -> UserOut:
        return to_user_out(await self.get_user_or_404(db, principal.id))

    async def update_profile(
        self, db: AsyncSession, principal: Principal, payload: ProfileUpdateRequest
    ) -> UserOut:
        user = await self.get_user_or_404(db, principal.id)

        username = normalize_username(payload.username)
        email = validate_email(payload.email) if payload.email and payload.email.strip() else None
        if username is None and email is None:
            raise ValidationError(message="Nothing to update")

        if email and await auth_service.email_taken(db, email, exclude_user_id=user.id):
            raise ConflictError(message="Email already registered", field="email")
        if username and await auth_service.username_taken(db, username, exclude_user_id=user.id):
            raise ConflictError(message="Username already taken", field="username")

        if email:
            user.email = email
        if username:
            user.username = username
        await db.flush()

        logger.info("User %s updated profile", user.id)
        return to_user_out(user)

    async def change_password(
        self, db: AsyncSession, principal: Principal, payload: PasswordChangeRequest
    ) -> None:
        if not payload.current_password or not payload.new_password:
            raise ValidationError(message="Current and new password are required")
        new_password = validate_password(payload.new_password, field="newPassword")

        user = await self.get_user_or_404(db, principal.id)
        if not verify_password(payload.current_password, user.password):
            raise ValidationError(
                message="Current password is incorrect", field="currentPassword"
            )

        user.password = hash_password(new_password)
        await db.flush()
        logger.info("User %s changed password", user.id)

    async def purge_user(self, db: AsyncSession, user: User) -> None:
        """Delete a user and everything they own. Does not commit."""
        user_id = user.id
        picture = user.profile_picture

        own_posts = select(Post.post_id).where(Post.user_id == user_id)
        own_entries = select(JournalEntry.entry_id).where(JournalEntry.user_id == user_id)

        db.expunge(user)
        await db.execute(
            _bulk_delete(
                PostLike,
                or_(PostLike.user_id == user_id, PostLike.post_id.in_(own_posts)),
            )
        )
        await db.execute(
            _bulk_delete(
                Comment,
                or_(Comment.user_id == user_id, Comment.post_id.in_(own_posts)),
            )
        )
        await db.execute(
            _bulk_delete(
                MoodCheckIn,
                or_(MoodCheckIn.user_id == user_id, MoodCheckIn.entry_id.in_(own_entries)),
            )
        )
        await db.execute(_bulk_delete(JournalEntry, JournalEntry.user_id == user_id))
        await db.execute(_bulk_delete(Post, Post.user_id == user_id))
        await db.execute(_bulk_delete(User, User.id == user_id))

        await file_service.cleanup_file(picture)
        logger.info("User %s and their content deleted", user_id)

    async def delete_account(
        self, db: AsyncSession, principal: Principal, payload: AccountDeleteRequest
    ) -> None:
        if not payload.password:
            raise ValidationError(message="Password is required", field="password")

        user = await self.get_user_or_404(db, principal.id)
        if not verify_password(payload.password, user.password):
            raise ValidationError(message="Password is incorrect", field="password")

        await self.purge_user(db, user)

    async def set_profile_picture(
        self,
        db: AsyncSession,
        principal: Principal,
        filename: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> UserOut:
        user = await self.get_user_or_404(db, principal.id)

        relative_path = await file_service.validate_and_store(
            filename, content, content_length
        )
        previous = user.profile_picture
        user.profile_picture = relative_path
        try:
            await db.flush()
        except Exception:
            await file_service.cleanup_file(relative_path)
            raise

        if previous and previous != relative_path:
            await file_service.cleanup_file(previous)

        logger.info("User %s uploaded a profile picture", user.id)
        return to_user_out(user)


user_service = UserService()
