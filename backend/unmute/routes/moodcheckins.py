"""
unMute Backend: Mood Check-in Route Handlers
==============================================

POST /moodcheckins attaches a mood label to one of the caller's journal
entries; GET /moodcheckins lists the caller's check-ins.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.common import ERROR_RESPONSES, MAX_ID, Envelope
from unmute.schemas.journal import MoodCheckInCreateRequest, MoodCheckInOut
from unmute.security import Principal, require_principal
from unmute.services.journal_service import journal_service

router = APIRouter(
    prefix="/moodcheckins",
    tags=["Mood check-ins"],
    responses={401: ERROR_RESPONSES[401]},
)


@router.post(
    "",
    status_code=201,
    response_model=Envelope[MoodCheckInOut],
    responses={
        400: ERROR_RESPONSES[400],
        403: ERROR_RESPONSES[403],
        404: ERROR_RESPONSES[404],
    },
    summary="Record a mood for a journal entry",
)
async def create_checkin(
    payload: MoodCheckInCreateRequest,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[MoodCheckInOut]:
    checkin = await journal_service.create_checkin(db, principal, payload)
    return Envelope[MoodCheckInOut](data=checkin, message="Mood recorded")


@router.get(
    "",
    response_model=Envelope[List[MoodCheckInOut]],
    summary="List the caller's mood check-ins",
)
async def list_checkins(
    entry_id: Optional[int] = Query(
        default=None, ge=1, le=MAX_ID, description="Only check-ins for this entry"
    ),
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[MoodCheckInOut]]:
    checkins = await journal_service.list_checkins(db, principal, entry_id=entry_id)
    return Envelope[List[MoodCheckInOut]](data=checkins)
