"""API routes for homework-help chats: problem submission, hints, resources."""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import ValidationError as SchemaError
from starlette.datastructures import FormData, UploadFile

from homework_helper.api.deps import CurrentUser, DbSession, Generator, Reader
from homework_helper.db.models import ChatRole
from homework_helper.errors import ValidationError
from homework_helper.schemas.chat import (
    AppendMessageRequest,
    ChatEnvelope,
    ChatResourcesRequest,
    ChatResourcesResponse,
    ChatResponse,
    ChatSubmitRequest,
    DetailResponse,
)
from homework_helper.schemas.resources import ResourcesResponse
from homework_helper.services import hint_session
from homework_helper.services.image_reader import ImageReader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


# =============================================================================
# HELPERS
# =============================================================================


def _validate_submission(payload: object) -> ChatSubmitRequest:
    try:
        return ChatSubmitRequest.model_validate(payload)
    except SchemaError as e:
        raise ValidationError(f"Invalid or missing messages in request: {e.errors()[0]['msg']}") from e


async def _submission_from_form(form: FormData, reader: ImageReader) -> ChatSubmitRequest:
    """
    Build a submission from multipart fields.

    Accepts either a `messages` field holding the JSON message list, or
    `message` / `chatId` / `image` fields. Text read from the image becomes
    the problem when `message` is empty and is appended to it otherwise.
    """
    messages_field = form.get("messages")
    if isinstance(messages_field, str):
        try:
            return _validate_submission({"messages": json.loads(messages_field)})
        except json.JSONDecodeError as e:
            raise ValidationError("Invalid messages format in form data") from e

    message = form.get("message")
    content = message.strip() if isinstance(message, str) else ""

    image = form.get("image")
    if isinstance(image, UploadFile) and image.filename:
        image_text = await reader.extract_text(await image.read(), image.content_type)
        if image_text:
            content = f"{content}\n\n{image_text}" if content else image_text
        elif not content:
            raise ValidationError("Could not read any text from the uploaded image")

    if not content:
        raise ValidationError("No message found in form data")

    chat_id = form.get("chatId") or form.get("chat_id")
    return _validate_submission(
        {"messages": [{"content": content, "role": "user", "chatId": chat_id or None}]}
    )


# =============================================================================
# PROBLEM SUBMISSION AND HINTS
# =============================================================================


@router.post("", response_model=ChatEnvelope)
async def submit_message(
    request: Request,
    db: DbSession,
    user: CurrentUser,
    generator: Generator,
    reader: Reader,
):
    """
    Submit a homework problem.

    Accepts JSON `{messages: [{content, role, chatId?}]}` or multipart form
    data with `message`, `chatId` and an optional `image`. Creates a chat
    with the first hint, or gives the next hint for the chat named by chatId.
    """
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            payload = await request.json()
        except ValueError as e:
            raise ValidationError("Invalid JSON in request body") from e
        submission = _validate_submission(payload)
    elif content_type.startswith(FORM_CONTENT_TYPES):
        submission = await _submission_from_form(await request.form(), reader)
    else:
        raise ValidationError(
            f"Unsupported content type: {content_type or 'none'}. "
            "Expected application/json or multipart/form-data"
        )

    chat = await hint_session.submit_problem(
        db, user.id, submission.content, generator, chat_id=submission.chat_id
    )
    return ChatEnvelope(chat=ChatResponse.model_validate(chat))


@router.post("/resources", response_model=ChatResourcesResponse)
async def attach_resources(
    request: ChatResourcesRequest,
    db: DbSession,
    user: CurrentUser,
    generator: Generator,
):
    """
    Attach learning resources to a completed chat.

    The question is the first user message of `messages` when given,
    otherwise the chat's original problem. Repeated calls return the
    resources attached by the first one.
    """
    question = None
    if request.messages:
        question = next((m.content for m in request.messages if m.role == "user"), None)

    chat, topics = await hint_session.request_resources(
        db, user.id, request.chat_id, generator, question=question
    )
    return ChatResourcesResponse(chat=ChatResponse.model_validate(chat), resources=topics)


@router.get("/{chat_id}", response_model=ChatEnvelope)
async def get_chat(chat_id: UUID, db: DbSession, user: CurrentUser):
    """Get a chat with its full message history."""
    chat = await hint_session.get_chat(db, user.id, chat_id)
    return ChatEnvelope(chat=ChatResponse.model_validate(chat))


@router.delete("/{chat_id}", response_model=DetailResponse)
async def delete_chat(chat_id: UUID, db: DbSession, user: CurrentUser):
    """Delete a chat and all its messages."""
    await hint_session.delete_chat(db, user.id, chat_id)
    return DetailResponse(detail="Chat deleted successfully")


@router.post("/{chat_id}/hint", response_model=ChatEnvelope)
async def request_hint(chat_id: UUID, db: DbSession, user: CurrentUser, generator: Generator):
    """Get another hint. Fails with 400 once both hints have been used."""
    chat = await hint_session.request_hint(db, user.id, chat_id, generator)
    return ChatEnvelope(chat=ChatResponse.model_validate(chat))


@router.post("/{chat_id}/message", response_model=ChatEnvelope)
async def append_message(
    chat_id: UUID,
    request: AppendMessageRequest,
    db: DbSession,
    user: CurrentUser,
):
    """Append a message verbatim (used to persist client-side resource messages)."""
    chat = await hint_session.append_message(
        db,
        user.id,
        chat_id,
        role=ChatRole(request.role),
        content=request.content,
        is_resource=request.is_resource,
    )
    return ChatEnvelope(chat=ChatResponse.model_validate(chat))


@router.get("/{chat_id}/resources", response_model=ResourcesResponse)
async def get_chat_resources(chat_id: UUID, db: DbSession, user: CurrentUser):
    """Resources attached to a chat (empty until resources were requested)."""
    chat = await hint_session.get_chat(db, user.id, chat_id)
    return ResourcesResponse(resources=hint_session.stored_resources(chat))
