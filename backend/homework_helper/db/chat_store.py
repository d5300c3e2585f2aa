"""
Persistence helpers for users and chats.

All functions take the request's AsyncSession and never commit; the caller
(service or request dependency) owns the transaction. Queries that fetch a
chat on behalf of a user are scoped by user_id at the SQL level.

Hint and resource transitions go through conditional UPDATEs
(`advance_hint`, `claim_resources`) so two concurrent requests against the
same chat cannot both move it. Plain appends are last-write-wins.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from homework_helper.db.models import Chat, ChatMessage, ChatRole, User, utcnow

MAX_HINTS = 2


@dataclass(frozen=True)
class NewMessage:
    """A message about to be appended to a chat."""

    role: ChatRole
    content: str
    is_resource: bool = False
    resources: list[dict[str, Any]] | None = None


def normalize_email(email: str) -> str:
    return email.strip().lower()


# =============================================================================
# USERS
# =============================================================================


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password_hash: str | None,
    image_url: str | None = None,
) -> User:
    user = User(
        name=name,
        email=normalize_email(email),
        password_hash=password_hash,
        image_url=image_url,
    )
    db.add(user)
    await db.flush()  # Get user.id
    return user


async def find_or_create_user(
    db: AsyncSession,
    email: str,
    *,
    name: str | None = None,
    image_url: str | None = None,
) -> User:
    """
    Look a user up by email, creating a credential-less account if missing.

    Accounts created here have no password hash and cannot log in with a
    password until one is set.
    """
    user = await find_user_by_email(db, email)
    if user is not None:
        return user
    return await create_user(
        db,
        name=name or "User",
        email=email,
        password_hash=None,
        image_url=image_url,
    )


# =============================================================================
# CHATS
# =============================================================================


def _build_message(chat_position: int, message: NewMessage) -> ChatMessage:
    return ChatMessage(
        position=chat_position,
        role=ChatRole(message.role).value,
        content=message.content,
        is_resource=message.is_resource,
        resources=message.resources,
        timestamp=utcnow(),
    )


async def create_chat(
    db: AsyncSession,
    user_id: UUID,
    messages: Sequence[NewMessage] = (),
    *,
    hints_used: int = 0,
) -> Chat:
    """Insert a chat with its initial messages."""
    chat = Chat(
        user_id=user_id,
        hints_used=hints_used,
        is_completed=hints_used >= MAX_HINTS,
        has_resources=any(m.is_resource for m in messages),
        messages=[_build_message(i, m) for i, m in enumerate(messages)],
    )
    db.add(chat)
    await db.flush()
    return chat


async def find_chat_by_id(
    db: AsyncSession,
    chat_id: UUID,
    user_id: UUID | None = None,
) -> Chat | None:
    """
    Fetch a chat with its messages.

    When user_id is given, chats owned by someone else are not returned.
    Always reloads from the database, so values changed by conditional
    updates in this session are visible.
    """
    stmt = select(Chat).where(Chat.id == chat_id)
    if user_id is not None:
        stmt = stmt.where(Chat.user_id == user_id)
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def append_messages(
    db: AsyncSession,
    chat: Chat,
    messages: Sequence[NewMessage],
) -> Chat:
    """Append messages after the chat's current last message."""
    start = len(chat.messages)
    for offset, message in enumerate(messages):
        chat.messages.append(_build_message(start + offset, message))
    if any(m.is_resource for m in messages):
        chat.has_resources = True
    chat.updated_at = utcnow()
    await db.flush()
    return chat


async def advance_hint(db: AsyncSession, chat_id: UUID, expected: int) -> bool:
    """
    Increment hints_used iff it still equals `expected`.

    Returns False when another request already moved the counter (or the
    chat is gone); the chat is left untouched in that case.
    """
    if expected >= MAX_HINTS:
        return False
    new_count = expected + 1
    result = await db.execute(
        update(Chat)
        .where(Chat.id == chat_id, Chat.hints_used == expected)
        .values(
            hints_used=new_count,
            is_completed=new_count >= MAX_HINTS,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def claim_resources(db: AsyncSession, chat_id: UUID) -> bool:
    """Set has_resources on a completed chat iff it is not already set."""
    result = await db.execute(
        update(Chat)
        .where(
            Chat.id == chat_id,
            Chat.is_completed.is_(True),
            Chat.has_resources.is_(False),
        )
        .values(has_resources=True, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def delete_chat(db: AsyncSession, chat_id: UUID, user_id: UUID) -> bool:
    """Hard-delete a chat and its messages. Returns False if it did not exist."""
    chat = await find_chat_by_id(db, chat_id, user_id)
    if chat is None:
        return False
    await db.delete(chat)
    await db.flush()
    return True


async def list_chats_for_user(db: AsyncSession, user_id: UUID) -> Sequence[Chat]:
    """List a user's chats, most recently updated first."""
    result = await db.execute(
        select(Chat)
        .where(Chat.user_id == user_id)
        .order_by(Chat.updated_at.desc(), Chat.created_at.desc())
    )
    return result.scalars().all()
