"""Services for external integrations."""

from homework_helper.services.hint_generator import hint_generator
from homework_helper.services.image_reader import image_reader

__all__ = ["hint_generator", "image_reader"]
