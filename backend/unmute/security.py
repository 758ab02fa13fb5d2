"""
unMute Backend: Password Hashing, Tokens and the Request Principal
===================================================================

What:  Everything that turns credentials into an authenticated caller.
How:   passlib's bcrypt CryptContext for password hashes, python-jose for
       HS256 bearer tokens, FastAPI's HTTPBearer for header parsing.
Who:   The auth service issues tokens; every route that cares about the
       caller declares one of the three dependencies below.

Dependencies:
    get_optional_principal  → Principal | None  (public routes; bad tokens
                                                 are treated as anonymous)
    require_principal       → Principal         (401 when missing/invalid)
    require_admin           → Principal         (401, or 403 for non-admins)

Token claims:
    {"id": <users.user_id>, "is_admin": <bool>, "exp": <unix time>}
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from unmute.config import settings
from unmute.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# auto_error=False: a missing header yields None instead of FastAPI's own 403
_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, decoded from a bearer token."""

    id: int
    is_admin: bool = False

    def can_modify(self, owner_id: Optional[int]) -> bool:
        """Owners and admins may delete content; nobody owns anonymous comments."""
        return self.is_admin or (owner_id is not None and owner_id == self.id)


# ── Passwords ─────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """
    Compare a plain password with a stored hash.

    Malformed hashes (e.g. rows imported without a password) count as a
    mismatch rather than a server error.
    """
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


# ── Tokens ────────────────────────────────────────────────────────────────

def create_access_token(user_id: int, is_admin: bool) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"id": user_id, "is_admin": bool(is_admin), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[Principal]:
    """
    Decode a bearer token into a Principal.

    Returns None for anything unusable: bad signature, expired, or a
    payload without an integer id. Callers decide whether that is a 401
    or an anonymous request.
    """
    try:
        payload: Dict[str, Any] = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.debug("Rejected bearer token: %s", str(e))
        return None

    # Tokens minted by the old backend used user_id / userId for the same claim
    raw_id = payload.get("id") or payload.get("user_id") or payload.get("userId")
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        return None

    is_admin = payload.get("is_admin") in (True, 1, "1", "true")
    return Principal(id=user_id, is_admin=is_admin)


# ── FastAPI dependencies ──────────────────────────────────────────────────

async def get_optional_principal(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[Principal]:
    if creds is None or not creds.credentials:
        return None
    return decode_access_token(creds.credentials)


async def require_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise AuthenticationError()
    return principal


async def require_admin(
    principal: Principal = Depends(require_principal),
) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedError(message="Admin access required")
    return principal
