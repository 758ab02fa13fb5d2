"""
unMute Backend: Resource and Admin Schemas
============================================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ResourceCreateRequest(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None


class ResourceOut(BaseModel):
    resource_id: int
    title: str
    url: Optional[str] = None
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AdminUserOut(BaseModel):
    user_id: int
    username: Optional[str] = None
    email: str
    profile_picture: Optional[str] = None
    is_admin: bool


class AdminToggleResult(BaseModel):
    user_id: int
    is_admin: bool
