"""
unMute Backend: Journal Route Handlers
========================================

What:  Private journal entries under /journal. Every route needs a token;
       entries are only ever listed for their owner.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.database import get_db_session
from unmute.schemas.common import ERROR_RESPONSES, DbId, Envelope
from unmute.schemas.journal import JournalEntryCreateRequest, JournalEntryOut
from unmute.security import Principal, require_principal
from unmute.services.journal_service import journal_service

router = APIRouter(
    prefix="/journal",
    tags=["Journal"],
    responses={401: ERROR_RESPONSES[401]},
)


@router.get(
    "",
    response_model=Envelope[List[JournalEntryOut]],
    summary="List the caller's journal entries",
)
async def list_entries(
    mood: Optional[str] = Query(default=None, description="Only entries whose latest mood matches"),
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[List[JournalEntryOut]]:
    entries = await journal_service.list_entries(db, principal, mood=mood)
    return Envelope[List[JournalEntryOut]](data=entries)


@router.get(
    "/{entry_id}",
    response_model=Envelope[JournalEntryOut],
    responses={403: ERROR_RESPONSES[403], 404: ERROR_RESPONSES[404]},
    summary="Get one journal entry",
)
async def get_entry(
    entry_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[JournalEntryOut]:
    return Envelope[JournalEntryOut](data=await journal_service.get_entry(db, principal, entry_id))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[JournalEntryOut],
    responses={400: ERROR_RESPONSES[400]},
    summary="Write a journal entry",
)
async def create_entry(
    payload: JournalEntryCreateRequest,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[JournalEntryOut]:
    entry = await journal_service.create_entry(db, principal, payload)
    return Envelope[JournalEntryOut](data=entry, message="Entry created")


@router.delete(
    "/{entry_id}",
    response_model=Envelope[None],
    responses={403: ERROR_RESPONSES[403], 404: ERROR_RESPONSES[404]},
    summary="Delete a journal entry and its mood check-ins",
)
async def delete_entry(
    entry_id: DbId,
    principal: Principal = Depends(require_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await journal_service.delete_entry(db, principal, entry_id)
    return Envelope[None](message="Entry deleted")
