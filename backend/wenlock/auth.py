"""
Auth module: password hashing, JWT creation/validation and the FastAPI
dependencies that resolve and authorize the acting user.

The signed credential is a JWT with payload {id, role, exp}. It is read from
the auth cookie first and from an "Authorization: Bearer" header second.
Any missing, malformed or expired credential fails the request with 401
before the handler runs.
"""

import time
from typing import Optional

import bcrypt
from fastapi import Depends, Request
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.config import get_settings
from wenlock.database import get_db
from wenlock.exceptions import AuthenticationError, AuthorizationError
from wenlock.models.user import User
from wenlock.permissions import allowed_roles


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_token(user: User, expires_in: Optional[int] = None) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    ttl = settings.token_expire_seconds if expires_in is None else expires_in
    payload = {
        "id": user.id,
        "role": user.role.value,
        "exp": int(time.time()) + ttl,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT, including expiry."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AuthenticationError("Not authorized, token failed")
    if not isinstance(payload.get("id"), int):
        raise AuthenticationError("Not authorized, token failed")
    return payload


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(get_settings().auth_cookie_name)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """FastAPI dependency. Resolves the credential to a stored User."""
    token = extract_token(request)
    if not token:
        raise AuthenticationError("Not authorized, no token")
    payload = decode_token(token)
    user = await db.get(User, payload["id"])
    if not user:
        raise AuthenticationError("Not authorized, user not found")
    return user


def authorize(operation: str):
    """Dependency factory: the current user, if their role may perform `operation`."""
    roles = allowed_roles(operation)

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AuthorizationError(f"User role '{user.role.value}' is not authorized to access this route")
        return user

    return _check
