"""Pydantic schemas for chat operations."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from homework_helper.schemas.base import BaseSchema, IDMixin, TimestampMixin
from homework_helper.schemas.resources import ResourceTopic


# Request schemas
class SubmittedMessage(BaseSchema):
    """One message of a problem submission."""

    content: str = Field(..., min_length=1, max_length=10000)
    role: Literal["user", "assistant"] = "user"
    chat_id: UUID | None = None


class ChatSubmitRequest(BaseSchema):
    """
    Problem submission.

    Only the last message is submitted; a chat_id on the first message
    continues an existing chat.
    """

    messages: list[SubmittedMessage] = Field(..., min_length=1)

    @property
    def chat_id(self) -> UUID | None:
        return self.messages[0].chat_id

    @property
    def content(self) -> str:
        return self.messages[-1].content


class AppendMessageRequest(BaseSchema):
    """Request to append a message verbatim."""

    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)
    is_resource: bool = False


class ChatResourcesRequest(BaseSchema):
    """Request to attach learning resources to a completed chat."""

    chat_id: UUID
    messages: list[SubmittedMessage] | None = None


# Response schemas
class MessageResponse(BaseSchema):
    """Chat message response."""

    role: str
    content: str
    is_resource: bool = False
    resources: list[ResourceTopic] | None = None
    timestamp: datetime


class ChatResponse(BaseSchema, IDMixin, TimestampMixin):
    """Chat with its full message history."""

    user_id: UUID
    messages: list[MessageResponse]
    hints_used: int
    is_completed: bool
    has_resources: bool


class ChatEnvelope(BaseSchema):
    chat: ChatResponse


class ChatListResponse(BaseSchema):
    """List of chats, newest-updated first."""

    chats: list[ChatResponse]


class ChatResourcesResponse(BaseSchema):
    chat: ChatResponse
    resources: list[ResourceTopic]


class DetailResponse(BaseSchema):
    detail: str
