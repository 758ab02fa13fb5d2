"""
unMute Backend: Auth and Profile Schemas
=========================================

Request fields are Optional on purpose: the services report missing values
with the same messages the React forms already display ("Email is
required", "Invalid credentials"), instead of FastAPI's generic field errors.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Unique login email")
    username: Optional[str] = Field(default=None, description="Optional unique display name")
    password: Optional[str] = Field(default=None, description="Plain password (6-72 bytes)")


class LoginRequest(BaseModel):
    """
    `identifier` may hold an email or a username. Older clients send
    `email` (or `username`) instead; any of the three is accepted.
    """
    identifier: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def login_identifier(self) -> Optional[str]:
        for value in (self.identifier, self.email, self.username):
            if value and value.strip():
                return value.strip()
        return None


class UserOut(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    is_admin: bool
    profile_picture: Optional[str] = Field(
        default=None, description="URL of the profile picture, e.g. /files/avatars/..."
    )


class LoginResult(UserOut):
    token: str = Field(description="Bearer token encoding {id, is_admin}")


class ProfileUpdateRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    # The Account page posts camelCase keys
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class AccountDeleteRequest(BaseModel):
    password: Optional[str] = None
