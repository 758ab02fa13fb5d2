"""
unMute Backend: Admin Route Handlers
======================================

What:  Moderation and user management under /admin.
Who:   The Admin Dashboard. Every route requires an admin token: no token
       is 401, a non-admin token is 403.

Route Inventory:
    GET    /admin/flagged-posts
    GET    /admin/flagged-comments
    DELETE /admin/posts/{id}
    POST   /admin/posts/{id}/unflag
    DELETE /admin/comments/{id}
    POST   /admin/comments/{id}/unflag
    GET    /admin/users
    DELETE /admin/users/{id}
    POST   /admin/users/{id}/toggle-admin
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.common import ERROR_RESPONSES, DbId, Envelope
from unmute.schemas.post import FlaggedCommentOut, PostOut
from unmute.schemas.resource import AdminToggleResult, AdminUserOut
from unmute.security import Principal, require_admin
from unmute.services.admin_service import admin_service

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={401: ERROR_RESPONSES[401], 403: ERROR_RESPONSES[403]},
)


@router.get("/flagged-posts", response_model=Envelope[List[PostOut]])
async def flagged_posts(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[PostOut]]:
    return Envelope[List[PostOut]](data=await admin_service.flagged_posts(db, admin))


@router.get("/flagged-comments", response_model=Envelope[List[FlaggedCommentOut]])
async def flagged_comments(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[FlaggedCommentOut]]:
    return Envelope[List[FlaggedCommentOut]](data=await admin_service.flagged_comments(db))


@router.delete(
    "/posts/{post_id}",
    response_model=Envelope[None],
    responses={404: ERROR_RESPONSES[404]},
)
async def delete_post(
    post_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await admin_service.delete_post(db, admin, post_id)
    return Envelope[None](message="Post deleted")


@router.post(
    "/posts/{post_id}/unflag",
    response_model=Envelope[None],
    responses={404: ERROR_RESPONSES[404]},
)
async def unflag_post(
    post_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await admin_service.unflag_post(db, admin, post_id)
    return Envelope[None](message="Post unflagged")


@router.delete(
    "/comments/{comment_id}",
    response_model=Envelope[None],
    responses={404: ERROR_RESPONSES[404]},
)
async def delete_comment(
    comment_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await admin_service.delete_comment(db, admin, comment_id)
    return Envelope[None](message="Comment deleted")


@router.post(
    "/comments/{comment_id}/unflag",
    response_model=Envelope[None],
    responses={404: ERROR_RESPONSES[404]},
)
async def unflag_comment(
    comment_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await admin_service.unflag_comment(db, admin, comment_id)
    return Envelope[None](message="Comment unflagged")


@router.get("/users", response_model=Envelope[List[AdminUserOut]])
async def list_users(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[AdminUserOut]]:
    return Envelope[List[AdminUserOut]](data=await admin_service.list_users(db))


@router.delete(
    "/users/{user_id}",
    response_model=Envelope[None],
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]},
    description="Removes the user and all their content. Admins cannot delete themselves.",
)
async def delete_user(
    user_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await admin_service.delete_user(db, admin, user_id)
    return Envelope[None](message="User deleted")


@router.post(
    "/users/{user_id}/toggle-admin",
    response_model=Envelope[AdminToggleResult],
    responses={404: ERROR_RESPONSES[404]},
)
async def toggle_admin(
    user_id: DbId,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[AdminToggleResult]:
    result = await admin_service.toggle_admin(db, admin, user_id)
    return Envelope[AdminToggleResult](data=result, message="Admin status updated")
