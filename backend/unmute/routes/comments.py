"""
unMute Backend: Comment Route Handlers
========================================

Route Inventory:
    GET    /posts/{post_id}/comments                       oldest first
    POST   /posts/{post_id}/comments                       token optional
    DELETE /posts/{post_id}/comments/{comment_id}          author or admin
    POST   /posts/{post_id}/comments/{comment_id}/flag     auth
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.common import ERROR_RESPONSES, DbId, Envelope
from unmute.schemas.post import CommentCreateRequest, CommentOut
from unmute.security import Principal, get_optional_principal, require_principal
from unmute.services.comment_service import comment_service

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["Comments"])


@router.get(
    "",
    response_model=Envelope[List[CommentOut]],
    responses={404: ERROR_RESPONSES[404]},
    summary="List comments on a post",
)
async def list_comments(
    post_id: DbId,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[CommentOut]]:
    return Envelope[List[CommentOut]](data=await comment_service.list_for_post(db, post_id))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[CommentOut],
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]},
    summary="Comment on a post",
    description="Without a bearer token the comment is stored as anonymous.",
)
async def create_comment(
    post_id: DbId,
    payload: CommentCreateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[CommentOut]:
    comment = await comment_service.create_comment(db, post_id, payload, principal)
    return Envelope[CommentOut](data=comment, message="Comment added")


@router.delete(
    "/{comment_id}",
    response_model=Envelope[None],
    responses={
        401: ERROR_RESPONSES[401],
        403: ERROR_RESPONSES[403],
        404: ERROR_RESPONSES[404],
    },
    summary="Delete a comment",
)
async def delete_comment(
    post_id: DbId,
    comment_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await comment_service.delete_comment(db, principal, post_id, comment_id)
    return Envelope[None](message="Comment deleted")


@router.post(
    "/{comment_id}/flag",
    response_model=Envelope[None],
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
    summary="Report a comment for moderation",
)
async def flag_comment(
    post_id: DbId,
    comment_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await comment_service.flag_comment(db, principal, post_id, comment_id)
    return Envelope[None](message="Comment flagged")
