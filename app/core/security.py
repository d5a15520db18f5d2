# app/core/security.py
"""Principal resolution for authenticated requests and password hashing.

Tokens are issued elsewhere; this module only verifies them. Every service
call that depends on who is acting receives the resulting ``Principal``
explicitly.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID
import logging

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .exceptions import ForbiddenError, UnauthorizedError
from ..models.enums import UserRole
from ..models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def _to_bcrypt_secret(password: str) -> bytes:
    # bcrypt only uses the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_to_bcrypt_secret(password), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def decode_access_token(token: str) -> UUID:
    """Return the user id carried in the token's ``sub`` claim, or the legacy ``id`` claim"""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return UUID(str(payload.get("sub") or payload["id"]))
    except (JWTError, KeyError, ValueError) as e:
        logger.warning(f"Token verification failed: {e}")
        raise UnauthorizedError("Not authorized, token failed")


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Not authorized, no token")

    user_id = decode_access_token(credentials.credentials)
    result = await db.execute(select(User.id, User.role).where(User.id == user_id))
    row = result.first()
    if row is None:
        raise UnauthorizedError("User not found")

    return Principal(user_id=row.id, role=row.role)


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise ForbiddenError("Not authorized as an admin")
    return principal
