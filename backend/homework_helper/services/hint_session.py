"""
Hint-session state machine.

A chat moves NEW -> FIRST_HINT_GIVEN -> COMPLETED as hints are handed out,
and may pick up learning resources once COMPLETED:

    submit problem       NEW              -> FIRST_HINT_GIVEN  (chat created)
    request another hint FIRST_HINT_GIVEN -> COMPLETED
    find resources       COMPLETED        -> COMPLETED + resources (idempotent)

Every transition calls the model before writing anything, then moves the
chat with a conditional update, so a failed model call leaves the chat as it
was and a request that loses a race does not double-count.
"""

import logging
from enum import Enum
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from homework_helper.db import chat_store
from homework_helper.db.chat_store import MAX_HINTS, NewMessage
from homework_helper.db.models import Chat, ChatMessage, ChatRole
from homework_helper.errors import MaxHintsExceeded, NotCompleted, NotFoundError, ValidationError
from homework_helper.schemas.resources import ResourceTopic
from homework_helper.services.hint_generator import (
    HintGenerator,
    HintStage,
    format_resources_message,
)

logger = logging.getLogger(__name__)

ANOTHER_HINT_REQUEST = "I need another hint for this problem."


class ChatState(str, Enum):
    NEW = "new"
    FIRST_HINT_GIVEN = "first_hint_given"
    COMPLETED = "completed"


def chat_state(chat: Chat | None) -> ChatState:
    if chat is None or chat.hints_used == 0:
        return ChatState.NEW
    if chat.hints_used < MAX_HINTS:
        return ChatState.FIRST_HINT_GIVEN
    return ChatState.COMPLETED


def next_hint_stage(chat: Chat | None) -> HintStage:
    """Stage of the next hint, or MaxHintsExceeded if none is left."""
    state = chat_state(chat)
    if state is ChatState.NEW:
        return HintStage.FIRST
    if state is ChatState.FIRST_HINT_GIVEN:
        return HintStage.SECOND
    raise MaxHintsExceeded()


def original_problem(chat: Chat) -> str:
    for message in chat.messages:
        if message.role == ChatRole.USER.value:
            return message.content
    return "unknown problem"


def resource_message(chat: Chat) -> ChatMessage | None:
    for message in chat.messages:
        if message.is_resource:
            return message
    return None


def stored_resources(chat: Chat) -> list[ResourceTopic]:
    """Structured topics of the chat's resource message, if it has any."""
    message = resource_message(chat)
    if message is None or not message.resources:
        return []
    return [ResourceTopic.model_validate(topic) for topic in message.resources]


async def _reload(db: AsyncSession, chat_id: UUID) -> Chat:
    chat = await chat_store.find_chat_by_id(db, chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    return chat


async def get_chat(db: AsyncSession, user_id: UUID, chat_id: UUID) -> Chat:
    chat = await chat_store.find_chat_by_id(db, chat_id, user_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    return chat


# =============================================================================
# TRANSITIONS
# =============================================================================


async def _advance(
    db: AsyncSession,
    chat: Chat,
    generator: HintGenerator,
    *,
    user_text: str,
    follow_up: str | None,
) -> Chat:
    expected = chat.hints_used
    stage = next_hint_stage(chat)

    history = [
        {"role": m.role, "content": m.content} for m in chat.messages if not m.is_resource
    ]
    problem = original_problem(chat) if chat.messages else user_text
    hint = await generator.generate_hint(stage, problem, history, follow_up=follow_up)

    if not await chat_store.advance_hint(db, chat.id, expected):
        logger.warning("Hint counter for chat %s moved concurrently, rejecting request", chat.id)
        raise MaxHintsExceeded()

    await chat_store.append_messages(
        db,
        chat,
        [
            NewMessage(role=ChatRole.USER, content=user_text),
            NewMessage(role=ChatRole.ASSISTANT, content=hint),
        ],
    )
    await db.commit()
    logger.info("Chat %s advanced to %d hints", chat.id, expected + 1)
    return await _reload(db, chat.id)


async def submit_problem(
    db: AsyncSession,
    user_id: UUID,
    content: str,
    generator: HintGenerator,
    chat_id: UUID | None = None,
) -> Chat:
    """
    Handle a problem submission.

    Without chat_id a new chat is created holding the problem and the first
    hint. With chat_id the named chat receives the submitted text and its
    next hint.
    """
    if chat_id is not None:
        chat = await get_chat(db, user_id, chat_id)
        return await _advance(db, chat, generator, user_text=content, follow_up=content)

    hint = await generator.generate_hint(HintStage.FIRST, content, [])
    chat = await chat_store.create_chat(
        db,
        user_id,
        [
            NewMessage(role=ChatRole.USER, content=content),
            NewMessage(role=ChatRole.ASSISTANT, content=hint),
        ],
        hints_used=1,
    )
    await db.commit()
    logger.info("Created chat %s for user %s", chat.id, user_id)
    return await _reload(db, chat.id)


async def request_hint(
    db: AsyncSession,
    user_id: UUID,
    chat_id: UUID,
    generator: HintGenerator,
) -> Chat:
    """Give the next hint for an existing chat."""
    chat = await get_chat(db, user_id, chat_id)
    return await _advance(db, chat, generator, user_text=ANOTHER_HINT_REQUEST, follow_up=None)


async def request_resources(
    db: AsyncSession,
    user_id: UUID,
    chat_id: UUID,
    generator: HintGenerator,
    question: str | None = None,
) -> tuple[Chat, list[ResourceTopic]]:
    """
    Attach learning resources to a completed chat.

    Idempotent: a chat that already has resources is returned as-is without
    calling the model.
    """
    chat = await get_chat(db, user_id, chat_id)
    if chat.has_resources:
        return chat, stored_resources(chat)
    if not chat.is_completed:
        raise NotCompleted()

    topics = await generator.generate_resources(question or original_problem(chat))

    if not await chat_store.claim_resources(db, chat.id):
        # Another request attached resources first; return those instead
        logger.info("Resources for chat %s were attached concurrently", chat_id)
        chat = await _reload(db, chat_id)
        return chat, stored_resources(chat)

    await chat_store.append_messages(
        db,
        chat,
        [
            NewMessage(
                role=ChatRole.ASSISTANT,
                content=format_resources_message(topics),
                is_resource=True,
                resources=[topic.model_dump() for topic in topics],
            )
        ],
    )
    await db.commit()
    logger.info("Attached %d resource topics to chat %s", len(topics), chat.id)
    return await _reload(db, chat.id), topics


async def append_message(
    db: AsyncSession,
    user_id: UUID,
    chat_id: UUID,
    *,
    role: ChatRole,
    content: str,
    is_resource: bool = False,
) -> Chat:
    """Append a message verbatim. Resource messages require a completed chat."""
    chat = await get_chat(db, user_id, chat_id)
    if is_resource:
        if role is not ChatRole.ASSISTANT:
            raise ValidationError("Resource messages must have the assistant role")
        if not chat.is_completed:
            raise NotCompleted()

    await chat_store.append_messages(
        db, chat, [NewMessage(role=role, content=content, is_resource=is_resource)]
    )
    await db.commit()
    return await _reload(db, chat.id)


async def delete_chat(db: AsyncSession, user_id: UUID, chat_id: UUID) -> None:
    if not await chat_store.delete_chat(db, chat_id, user_id):
        raise NotFoundError("Chat not found")
    await db.commit()
    logger.info("Deleted chat %s", chat_id)
