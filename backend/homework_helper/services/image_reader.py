"""Problem-photo transcription using Anthropic vision."""

import base64
import logging

from anthropic import AsyncAnthropic

from homework_helper.config import get_settings
from homework_helper.errors import ValidationError

logger = logging.getLogger(__name__)
settings = get_settings()

SUPPORTED_MEDIA_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})

TRANSCRIBE_PROMPT = (
    "Transcribe the homework problem in this image exactly as written. "
    "Use LaTeX with $ for inline math and $$ for display math. "
    "Reply with the transcription only, without solving anything."
)


class ImageReader:
    """Extracts problem text from uploaded images."""

    def __init__(self, client: AsyncAnthropic | None = None):
        self.client = client or AsyncAnthropic(api_key=settings.anthropic_api_key)

    @staticmethod
    def validate(image_bytes: bytes, media_type: str | None) -> str:
        """Check an upload and return its normalized media type."""
        media_type = (media_type or "").split(";")[0].strip().lower()
        if media_type == "image/jpg":
            media_type = "image/jpeg"
        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise ValidationError(
                "Unsupported image type. Upload a JPEG, PNG, GIF or WebP image."
            )
        if not image_bytes:
            raise ValidationError("Uploaded image is empty")
        if len(image_bytes) > settings.max_image_size_bytes:
            raise ValidationError(
                f"Image too large. Maximum size is {settings.max_image_size_bytes // (1024 * 1024)}MB"
            )
        return media_type

    async def extract_text(self, image_bytes: bytes, media_type: str | None) -> str:
        """
        Transcribe the text of an image.

        Returns an empty string when the model call fails; the caller decides
        whether the submission still has enough text to proceed.
        """
        media_type = self.validate(image_bytes, media_type)
        try:
            response = await self.client.messages.create(
                model=settings.llm_model,
                max_tokens=settings.llm_max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": media_type,
                                    "data": base64.b64encode(image_bytes).decode("ascii"),
                                },
                            },
                            {"type": "text", "text": TRANSCRIBE_PROMPT},
                        ],
                    }
                ],
            )
        except Exception:
            logger.exception("Image transcription failed")
            return ""

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return text.strip()


# Singleton instance
image_reader = ImageReader()
