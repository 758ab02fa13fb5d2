"""
unMute Backend: Auth Service
=============================

What:  Registration and login.
How:   Validates input, checks uniqueness, stores bcrypt hashes, issues
       bearer tokens through unmute.security.
Who:   Called by routes/auth.py.

Failure modes:
    missing/malformed input      → ValidationError (400)
    email or username taken      → ConflictError (409), nothing is inserted
    unknown identifier/password  → ValidationError "Invalid credentials" (400)
"""

import logging
import re
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from unmute.exceptions import ConflictError, ValidationError
from unmute.models.user import User
from unmute.schemas.auth import LoginRequest, LoginResult, RegisterRequest, UserOut
from unmute.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def validate_email(email: Optional[str]) -> str:
    if not email or not email.strip():
        raise ValidationError(message="Email is required", field="email")
    email = email.strip().lower()
    if len(email) > 255 or not EMAIL_REGEX.match(email):
        raise ValidationError(message="Invalid email format", field="email")
    return email


def validate_password(password: Optional[str], field: str = "password") -> str:
    if not password:
        raise ValidationError(message="Password is required", field=field)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field=field,
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
            field=field,
        )
    return password


def normalize_username(username: Optional[str]) -> Optional[str]:
    if username is None:
        return None
    username = username.strip()
    if not username:
        return None
    if len(username) > 100:
        raise ValidationError(message="Username must be at most 100 characters", field="username")
    return username


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        username=user.username,
        is_admin=bool(user.is_admin),
        profile_picture=f"/files/{user.profile_picture}" if user.profile_picture else None,
    )


class AuthService:
    """Stateless; every method receives the request's session."""

    async def email_taken(
        self, db: AsyncSession, email: str, exclude_user_id: Optional[int] = None
    ) -> bool:
        query = select(User.id).where(func.lower(User.email) == email.lower())
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def username_taken(
        self, db: AsyncSession, username: str, exclude_user_id: Optional[int] = None
    ) -> bool:
        query = select(User.id).where(User.username == username)
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> UserOut:
        """
        Create a regular (non-admin) account.

        Admin rights are granted only through the admin toggle; an
        `is_admin` key in the request body is ignored.
        """
        email = validate_email(payload.email)
        password = validate_password(payload.password)
        username = normalize_username(payload.username)

        if await self.email_taken(db, email):
            raise ConflictError(message="Email already registered", field="email")
        if username and await self.username_taken(db, username):
            raise ConflictError(message="Username already taken", field="username")

        user = User(
            email=email,
            username=username,
            password=hash_password(password),
            is_admin=False,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await db.rollback()
            raise ConflictError(message="Email already registered", field="email")

        logger.info("Registered user %s", user.id)
        return to_user_out(user)

    async def login(self, db: AsyncSession, payload: LoginRequest) -> LoginResult:
        identifier = payload.login_identifier
        if not identifier or not payload.password:
            raise ValidationError(message="Identifier and password are required")

        result = await db.execute(
            select(User)
            .where(
                or_(
                    func.lower(User.email) == identifier.lower(),
                    User.username == identifier,
                )
            )
            .limit(1)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(payload.password, user.password):
            logger.info("Failed login attempt")
            raise ValidationError(message="Invalid credentials")

        token = create_access_token(user.id, bool(user.is_admin))
        logger.info("User %s logged in", user.id)
        return LoginResult(token=token, **to_user_out(user).model_dump())


auth_service = AuthService()
