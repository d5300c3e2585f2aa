"""Chat history listing."""

from fastapi import APIRouter

from homework_helper.api.deps import CurrentUser, DbSession
from homework_helper.db import chat_store
from homework_helper.schemas.chat import ChatListResponse, ChatResponse

router = APIRouter(prefix="/chats", tags=["chat"])


@router.get("", response_model=ChatListResponse)
async def list_chats(db: DbSession, user: CurrentUser):
    """List the user's chats, most recently updated first."""
    chats = await chat_store.list_chats_for_user(db, user.id)
    return ChatListResponse(chats=[ChatResponse.model_validate(c) for c in chats])
