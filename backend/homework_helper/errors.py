"""
Domain errors.

Services raise these; the application exception handler in main.py renders
them as `{"detail": ...}` with the status code carried by the class.
"""

from fastapi import status


class HomeworkHelperError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An internal error occurred."

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(HomeworkHelperError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request."


class AuthError(HomeworkHelperError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Not authenticated"


class NotFoundError(HomeworkHelperError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"


class MaxHintsExceeded(HomeworkHelperError):
    """A hint was requested for a chat that already used both hints."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Maximum hints already used for this chat"


class NotCompleted(HomeworkHelperError):
    """Resources were requested before the chat used both hints."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Learning resources are available once both hints have been used"


class AIGenerationFailed(HomeworkHelperError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Error generating hint"


class PersistenceError(HomeworkHelperError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "A database error occurred."
