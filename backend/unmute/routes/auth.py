"""
unMute Backend: Auth Route Handlers
=====================================

What:  POST /auth/register and POST /auth/login.
Who:   Called by the Signup and Login pages. The router is mounted twice,
       at the root and under /api, because both client builds are in use.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.auth import LoginRequest, LoginResult, RegisterRequest, UserOut
from unmute.schemas.common import ERROR_RESPONSES, ErrorResponse, Envelope
from unmute.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=Envelope[UserOut],
    responses={
        400: ERROR_RESPONSES[400],
        409: {"description": "Email or username already taken", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserOut]:
    user = await auth_service.register(db, payload)
    return Envelope[UserOut](data=user, message="User registered")


@router.post(
    "/login",
    response_model=Envelope[LoginResult],
    responses={400: ERROR_RESPONSES[400]},
    summary="Exchange credentials for a bearer token",
    description=(
        "Accepts an email or username as `identifier` (or the older `email` / "
        "`username` keys). The returned token encodes the user id and admin flag."
    ),
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[LoginResult]:
    result = await auth_service.login(db, payload)
    return Envelope[LoginResult](data=result, message="Login successful")
