"""
unMute Backend: Journal and Mood Check-in Service
===================================================

What:  Private journal entries and the mood labels attached to them.
How:   Entries are always scoped to the caller; each listed entry carries
       its newest mood via a correlated subquery.
Who:   Called by routes/journal.py and routes/moodcheckins.py.

Transactions:
    Deleting an entry removes its check-ins and the entry inside one
    explicit transaction that this service commits itself. Creating an
    entry and its first check-in are two separate requests; a failure
    between them leaves an entry without a mood.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from unmute.models.journal import MOOD_LABELS, JournalEntry, MoodCheckIn
from unmute.schemas.common import MAX_ID
from unmute.schemas.journal import (
    JournalEntryCreateRequest,
    JournalEntryOut,
    MoodCheckInCreateRequest,
    MoodCheckInOut,
)
from unmute.security import Principal

logger = logging.getLogger(__name__)

JOURNAL_LIMIT = 200
TITLE_MAX = 255


def _latest_mood_subquery():
    return (
        select(MoodCheckIn.mood)
        .where(MoodCheckIn.entry_id == JournalEntry.entry_id)
        .order_by(MoodCheckIn.created_at.desc(), MoodCheckIn.checkin_id.desc())
        .limit(1)
        .correlate(JournalEntry)
        .scalar_subquery()
    )


def _to_entry_out(entry: JournalEntry, mood: Optional[str]) -> JournalEntryOut:
    return JournalEntryOut(
        entry_id=entry.entry_id,
        user_id=entry.user_id,
        title=entry.title,
        content=entry.content,
        created_at=entry.created_at,
        mood=mood,
    )


def parse_entry_id(raw) -> Optional[int]:
    """Accept ints and numeric strings; anything else is treated as missing."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    raw = str(raw).strip()
    if not raw.isdigit():
        return None
    return int(raw)


class JournalService:
    """
    Business logic for journal entries and mood check-ins.

    Responsibilities:
        - list_entries() / get_entry() / create_entry() / delete_entry()
        - create_checkin() / list_checkins()
    """

    async def _get_owned_entry(
        self, db: AsyncSession, principal: Principal, entry_id: int
    ) -> JournalEntry:
        entry = await db.get(JournalEntry, entry_id)
        if entry is None:
            raise NotFoundError(resource="Journal entry", resource_id=entry_id)
        if not principal.can_modify(entry.user_id):
            raise PermissionDeniedError()
        return entry

    async def list_entries(
        self, db: AsyncSession, principal: Principal, mood: Optional[str] = None
    ) -> List[JournalEntryOut]:
        latest_mood = _latest_mood_subquery()
        query = select(JournalEntry, latest_mood.label("mood")).where(
            JournalEntry.user_id == principal.id
        )

        if mood and mood.strip():
            mood = mood.strip().lower()
            if mood not in MOOD_LABELS:
                raise ValidationError(message="Invalid mood", field="mood")
            query = query.where(latest_mood == mood)

        query = query.order_by(
            JournalEntry.created_at.desc(), JournalEntry.entry_id.desc()
        ).limit(JOURNAL_LIMIT)

        result = await db.execute(query)
        return [_to_entry_out(entry, entry_mood) for entry, entry_mood in result.all()]

    async def get_entry(
        self, db: AsyncSession, principal: Principal, entry_id: int
    ) -> JournalEntryOut:
        entry = await self._get_owned_entry(db, principal, entry_id)
        result = await db.execute(
            select(MoodCheckIn.mood)
            .where(MoodCheckIn.entry_id == entry_id)
            .order_by(MoodCheckIn.created_at.desc(), MoodCheckIn.checkin_id.desc())
            .limit(1)
        )
        return _to_entry_out(entry, result.scalar_one_or_none())

    async def create_entry(
        self, db: AsyncSession, principal: Principal, payload: JournalEntryCreateRequest
    ) -> JournalEntryOut:
        content = (payload.content or "").strip()
        if not content:
            raise ValidationError(message="Content is required", field="content")

        title = (payload.title or "").strip() or None
        entry = JournalEntry(
            user_id=principal.id,
            title=title[:TITLE_MAX] if title else None,
            content=content,
        )
        db.add(entry)
        await db.flush()
        logger.info("Journal entry %s created by user %s", entry.entry_id, principal.id)
        return _to_entry_out(entry, None)

    async def delete_entry(
        self, db: AsyncSession, principal: Principal, entry_id: int
    ) -> None:
        """
        Delete an entry and its mood check-ins atomically.

        Either both deletes are committed or neither is; on failure the
        transaction is rolled back and DatabaseError is raised.
        """
        entry = await self._get_owned_entry(db, principal, entry_id)
        db.expunge(entry)

        try:
            await db.execute(
                delete(MoodCheckIn)
                .where(MoodCheckIn.entry_id == entry_id)
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                delete(JournalEntry)
                .where(JournalEntry.entry_id == entry_id)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to delete journal entry %s: %s", entry_id, str(e))
            raise DatabaseError(context={"entry_id": entry_id})

        logger.info("Journal entry %s deleted by user %s", entry_id, principal.id)

    # ── Mood check-ins ────────────────────────────────────────────────────

    async def create_checkin(
        self, db: AsyncSession, principal: Principal, payload: MoodCheckInCreateRequest
    ) -> MoodCheckInOut:
        entry_id = parse_entry_id(payload.entry_id)
        mood = (payload.mood or "").strip().lower()
        if entry_id is None or not mood:
            raise ValidationError(
                message="entry_id and mood are required",
                context={"required": ["entry_id", "mood"]},
            )
        if mood not in MOOD_LABELS:
            raise ValidationError(
                message="Invalid mood",
                field="mood",
                context={"allowed": list(MOOD_LABELS)},
            )

        entry = None
        # Ids past the column range are never stored
        if 1 <= entry_id <= MAX_ID:
            entry = await db.get(JournalEntry, entry_id)
        if entry is None:
            raise NotFoundError(resource="Journal entry", resource_id=entry_id)
        # Only the owner attaches moods, admins included
        if entry.user_id != principal.id:
            raise PermissionDeniedError()

        checkin = MoodCheckIn(user_id=principal.id, entry_id=entry_id, mood=mood)
        db.add(checkin)
        await db.flush()
        return MoodCheckInOut.model_validate(checkin)

    async def list_checkins(
        self, db: AsyncSession, principal: Principal, entry_id: Optional[int] = None
    ) -> List[MoodCheckInOut]:
        query = select(MoodCheckIn).where(MoodCheckIn.user_id == principal.id)
        if entry_id is not None:
            query = query.where(MoodCheckIn.entry_id == entry_id)
        query = query.order_by(
            MoodCheckIn.created_at.desc(), MoodCheckIn.checkin_id.desc()
        ).limit(JOURNAL_LIMIT)

        result = await db.execute(query)
        return [MoodCheckInOut.model_validate(c) for c in result.scalars().all()]


journal_service = JournalService()
