"""API routes package."""

from homework_helper.api.routes import auth, chat, chats, resources

__all__ = [
    "auth",
    "chat",
    "chats",
    "resources",
]
