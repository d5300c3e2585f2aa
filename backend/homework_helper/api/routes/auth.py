"""
Authentication Routes

Endpoints:
- POST /auth/signup - Create an account with name, email and password
- POST /auth/login - Exchange email/password for a session
- POST /auth/logout - Clear session
- GET /auth/me - Get current user profile
- PATCH /auth/me - Update profile fields

Auth Flow:
1. Frontend POSTs name/email/password to /auth/signup
2. Frontend POSTs email/password to /auth/login
3. Backend verifies the bcrypt hash and returns a JWT (cookie and body)
4. Subsequent requests carry the cookie or an Authorization: Bearer header
"""

import logging

from fastapi import APIRouter, Response, status

from homework_helper.api.deps import (
    CurrentUser,
    DbSession,
    create_access_token,
    hash_password,
    verify_password,
)
from homework_helper.config import get_settings
from homework_helper.db import chat_store
from homework_helper.errors import AuthError, ValidationError
from homework_helper.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from homework_helper.schemas.user import SignupResponse, UserRead, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


def _set_session_cookie(response: Response, access_token: str, max_age: int) -> None:
    # For cross-domain deployments, use samesite="none" + secure=True
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
        max_age=max_age,
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest, db: DbSession) -> SignupResponse:
    """
    Create a new account.

    Rejects passwords shorter than the configured minimum and emails that
    are already registered.
    """
    if len(request.password) < settings.password_min_length:
        raise ValidationError(
            f"Password must be at least {settings.password_min_length} characters long"
        )

    if await chat_store.find_user_by_email(db, request.email) is not None:
        raise ValidationError("User already exists")

    user = await chat_store.create_user(
        db,
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
    )
    await db.commit()
    logger.info("Created user %s", user.id)

    return SignupResponse(user_id=user.id, name=user.name, email=user.email)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, response: Response, db: DbSession) -> TokenResponse:
    """Verify credentials and start a session."""
    user = await chat_store.find_user_by_email(db, request.email)
    if user is None or not verify_password(request.password, user.password_hash):
        raise AuthError("Invalid email or password")

    access_token = create_access_token(user.id)
    expires_in = settings.jwt_expire_minutes * 60
    _set_session_cookie(response, access_token, expires_in)

    return TokenResponse(access_token=access_token, expires_in=expires_in)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """
    Clear the authentication session.

    Note: This only clears the cookie. If the client stored the JWT
    elsewhere, it remains valid until expiry.
    """
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
    )


@router.get("/me", response_model=UserRead)
async def get_me(current_user: CurrentUser) -> UserRead:
    """Get the current authenticated user's profile."""
    return UserRead.model_validate(current_user)


@router.patch("/me", response_model=UserRead)
async def update_me(request: UserUpdate, current_user: CurrentUser, db: DbSession) -> UserRead:
    """Update profile fields. Email and password are not editable here."""
    if request.name is not None:
        current_user.name = request.name
    if request.image_url is not None:
        current_user.image_url = request.image_url
    await db.commit()
    await db.refresh(current_user)
    return UserRead.model_validate(current_user)
