"""
Request dependencies: sessions, passwords and service injection.

A request is authenticated by a JWT carried either in an
`Authorization: Bearer` header or in the HttpOnly `access_token` cookie set
at login. Passwords are stored as bcrypt hashes via passlib.

The hint generator and image reader are injected through dependencies so
tests can swap the Anthropic client for a fake.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from homework_helper.config import get_settings
from homework_helper.db.models import User
from homework_helper.db.session import get_db
from homework_helper.errors import AuthError
from homework_helper.services.hint_generator import HintGenerator, hint_generator
from homework_helper.services.image_reader import ImageReader, image_reader

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# =============================================================================
# PASSWORDS
# =============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password; accounts without a password hash never match."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# =============================================================================
# SESSION TOKENS
# =============================================================================


def create_access_token(user_id: UUID) -> str:
    """Issue a session token whose subject is the user id. No profile data goes in it."""
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    claims = {"sub": str(user_id), "exp": expires_at}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID | None:
    """User id carried by a valid token, or None if it is malformed, forged or expired."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return UUID(claims["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """
    Session token of the request.

    An `Authorization: Bearer` header wins over the `access_token` cookie so
    API clients are not shadowed by a stale browser session.
    """
    token = _bearer_token(authorization) or access_token
    if not token:
        raise AuthError()
    return token


async def get_current_user(
    token: Annotated[str, Depends(get_token_from_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """The account the session token belongs to. Raises AuthError otherwise."""
    user_id = decode_access_token(token)
    user = await db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise AuthError("Could not validate credentials")
    return user


# =============================================================================
# SERVICE DEPENDENCIES (overridable in tests)
# =============================================================================


def get_hint_generator() -> HintGenerator:
    return hint_generator


def get_image_reader() -> ImageReader:
    return image_reader


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Generator = Annotated[HintGenerator, Depends(get_hint_generator)]
Reader = Annotated[ImageReader, Depends(get_image_reader)]
