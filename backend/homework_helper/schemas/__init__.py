"""Pydantic schemas for API request/response validation."""

from homework_helper.schemas.user import SignupResponse, UserRead, UserUpdate
from homework_helper.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from homework_helper.schemas.resources import (
    ResourceLink,
    ResourcesRequest,
    ResourcesResponse,
    ResourceTopic,
)
from homework_helper.schemas.chat import (
    AppendMessageRequest,
    ChatEnvelope,
    ChatListResponse,
    ChatResourcesRequest,
    ChatResourcesResponse,
    ChatResponse,
    ChatSubmitRequest,
    DetailResponse,
    MessageResponse,
    SubmittedMessage,
)

__all__ = [
    # User
    "SignupResponse",
    "UserRead",
    "UserUpdate",
    # Auth
    "LoginRequest",
    "SignupRequest",
    "TokenResponse",
    # Resources
    "ResourceLink",
    "ResourcesRequest",
    "ResourcesResponse",
    "ResourceTopic",
    # Chat
    "AppendMessageRequest",
    "ChatEnvelope",
    "ChatListResponse",
    "ChatResourcesRequest",
    "ChatResourcesResponse",
    "ChatResponse",
    "ChatSubmitRequest",
    "DetailResponse",
    "MessageResponse",
    "SubmittedMessage",
]
