"""
unMute Backend: User Profile Route Handlers
=============================================

What:  The Account page under /user. Every route acts on the caller.

Route Inventory:
    GET    /user/profile           current profile
    PUT    /user/profile           change username and/or email
    PUT    /user/password          {currentPassword, newPassword}
    DELETE /user/account           {password}; removes all the user's content
    POST   /user/profile/picture   multipart "file", PNG or JPEG
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.auth import (
    AccountDeleteRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    UserOut,
)
from unmute.schemas.common import ERROR_RESPONSES, ErrorResponse, Envelope
from unmute.security import Principal, require_principal
from unmute.services.user_service import user_service

router = APIRouter(
    prefix="/user",
    tags=["User"],
    responses={401: ERROR_RESPONSES[401]},
)


@router.get(
    "/profile",
    response_model=Envelope[UserOut],
    responses={404: ERROR_RESPONSES[404]},
    summary="Get the caller's profile",
)
async def get_profile(
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserOut]:
    return Envelope[UserOut](data=await user_service.get_profile(db, principal))


@router.put(
    "/profile",
    response_model=Envelope[UserOut],
    responses={
        400: ERROR_RESPONSES[400],
        409: {"description": "Email or username already taken", "model": ErrorResponse},
    },
    summary="Update username or email",
)
async def update_profile(
    payload: ProfileUpdateRequest,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserOut]:
    user = await user_service.update_profile(db, principal, payload)
    return Envelope[UserOut](data=user, message="Profile updated")


@router.put(
    "/password",
    response_model=Envelope[None],
    responses={400: ERROR_RESPONSES[400]},
    summary="Change password",
)
async def change_password(
    payload: PasswordChangeRequest,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await user_service.change_password(db, principal, payload)
    return Envelope[None](message="Password updated")


@router.delete(
    "/account",
    response_model=Envelope[None],
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]},
    summary="Delete the caller's account and content",
)
async def delete_account(
    payload: AccountDeleteRequest,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await user_service.delete_account(db, principal, payload)
    return Envelope[None](message="Account deleted")


@router.post(
    "/profile/picture",
    response_model=Envelope[UserOut],
    responses={400: ERROR_RESPONSES[400], 500: ERROR_RESPONSES[500]},
    summary="Upload a profile picture",
    description="PNG or JPEG, checked by extension and by libmagic MIME detection.",
)
async def upload_profile_picture(
    file: UploadFile = File(..., description="PNG or JPEG image"),
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserOut]:
    content = await file.read()
    user = await user_service.set_profile_picture(
        db,
        principal,
        filename=file.filename,
        content=content,
        content_length=file.size,
    )
    return Envelope[UserOut](data=user, message="Profile picture updated")
