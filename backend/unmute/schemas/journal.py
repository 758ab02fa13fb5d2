"""
unMute Backend: Journal and Mood Check-in Schemas
===================================================
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class JournalEntryCreateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class JournalEntryOut(BaseModel):
    entry_id: int
    user_id: int
    title: Optional[str] = None
    content: str
    created_at: datetime
    mood: Optional[str] = None

    model_config = {"from_attributes": True}


class MoodCheckInCreateRequest(BaseModel):
    # The entry page sends whatever id the create call returned; accept
    # numeric strings as well
    entry_id: Optional[Union[int, str]] = None
    mood: Optional[str] = None


class MoodCheckInOut(BaseModel):
    checkin_id: int
    user_id: int
    entry_id: int
    mood: str
    created_at: datetime

    model_config = {"from_attributes": True}
