"""
unMute Backend: Post and Like Route Handlers
==============================================

What:  The community feed under /posts.
Who:   Called by the Explore, View Post and Add Post pages.

Route Inventory:
    GET    /posts/public[?topic=]   feed, newest first (optional auth)
    GET    /posts/{id}              one post (optional auth)
    POST   /posts                   create (auth)
    POST   /posts/{id}/like         toggle the caller's like (auth)
    GET    /posts/{id}/likes        {count, liked_by_user} (optional auth)
    GET    /posts/{id}/likers       who liked it
    POST   /posts/{id}/flag         report for moderation (auth)
    DELETE /posts/{id}              author or admin (auth)

/posts/public is declared before /posts/{post_id} so "public" is never
parsed as an id.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.common import ERROR_RESPONSES, DbId, Envelope
from unmute.schemas.post import (
    LikerOut,
    LikeSummary,
    LikeToggleResult,
    PostCreateRequest,
    PostOut,
)
from unmute.security import Principal, get_optional_principal, require_principal
from unmute.services.post_service import post_service

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get(
    "/public",
    response_model=Envelope[List[PostOut]],
    summary="List the latest public posts",
)
async def list_public_posts(
    topic: Optional[str] = Query(default=None, description="Only posts with this topic"),
    viewer: Optional[Principal] = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[PostOut]]:
    posts = await post_service.list_public(db, viewer=viewer, topic=topic)
    return Envelope[List[PostOut]](data=posts)


@router.get(
    "/{post_id}",
    response_model=Envelope[PostOut],
    responses={404: ERROR_RESPONSES[404]},
    summary="Get a single post",
)
async def get_post(
    post_id: DbId,
    viewer: Optional[Principal] = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[PostOut]:
    return Envelope[PostOut](data=await post_service.get_post(db, post_id, viewer))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[PostOut],
    responses={400: ERROR_RESPONSES[400], 401: ERROR_RESPONSES[401]},
    summary="Create a post",
)
async def create_post(
    payload: PostCreateRequest,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[PostOut]:
    post = await post_service.create_post(db, principal, payload)
    return Envelope[PostOut](data=post, message="Post created")


@router.post(
    "/{post_id}/like",
    response_model=Envelope[LikeToggleResult],
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
    summary="Like or unlike a post",
)
async def toggle_like(
    post_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[LikeToggleResult]:
    result = await post_service.toggle_like(db, principal, post_id)
    return Envelope[LikeToggleResult](data=result, message=f"Post {result.action}")


@router.get(
    "/{post_id}/likes",
    response_model=Envelope[LikeSummary],
    responses={404: ERROR_RESPONSES[404]},
    summary="Like count and whether the caller liked the post",
)
async def like_summary(
    post_id: DbId,
    viewer: Optional[Principal] = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[LikeSummary]:
    return Envelope[LikeSummary](data=await post_service.like_summary(db, post_id, viewer))


@router.get(
    "/{post_id}/likers",
    response_model=Envelope[List[LikerOut]],
    responses={404: ERROR_RESPONSES[404]},
    summary="Users who liked a post",
)
async def list_likers(
    post_id: DbId,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[LikerOut]]:
    return Envelope[List[LikerOut]](data=await post_service.list_likers(db, post_id))


@router.post(
    "/{post_id}/flag",
    response_model=Envelope[None],
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
    summary="Report a post for moderation",
)
async def flag_post(
    post_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await post_service.flag_post(db, principal, post_id)
    return Envelope[None](message="Post flagged")


@router.delete(
    "/{post_id}",
    response_model=Envelope[None],
    responses={
        401: ERROR_RESPONSES[401],
        403: ERROR_RESPONSES[403],
        404: ERROR_RESPONSES[404],
    },
    summary="Delete a post with its comments and likes",
)
async def delete_post(
    post_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await post_service.delete_post(db, principal, post_id)
    return Envelope[None](message="Post deleted")
