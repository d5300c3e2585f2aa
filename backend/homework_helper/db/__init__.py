"""Database package: models, session lifecycle, and persistence helpers."""
