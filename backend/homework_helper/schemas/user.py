"""User schemas."""

from uuid import UUID

from pydantic import Field

from homework_helper.schemas.base import BaseSchema, IDMixin, TimestampMixin


class UserRead(BaseSchema, IDMixin, TimestampMixin):
    """Schema for reading user data."""

    email: str
    name: str
    image_url: str | None = None


class SignupResponse(BaseSchema):
    """Returned by POST /auth/signup."""

    message: str = "User created successfully"
    user_id: UUID
    name: str
    email: str


class UserUpdate(BaseSchema):
    """Schema for updating user profile."""

    name: str | None = Field(None, min_length=1, max_length=255)
    image_url: str | None = None
