"""Tests for database URL handling in settings."""

from homework_helper.config import Settings


def test_database_url_built_from_parts():
    settings = Settings(postgres_user="hh", postgres_password="pw", postgres_host="db", postgres_db="hw")

    assert settings.database_url == "postgresql+asyncpg://hh:pw@db:5432/hw"
    assert settings.database_url_sync == "postgresql://hh:pw@db:5432/hw"
    assert settings.database_requires_ssl is False


def test_hosted_override_with_ssl():
    settings = Settings(database_url_override="postgres://u:p@host.example.com/db?sslmode=require")

    assert settings.database_url == "postgresql+asyncpg://u:p@host.example.com/db"
    assert settings.database_url_sync == "postgresql://u:p@host.example.com/db?sslmode=require"
    assert settings.database_requires_ssl is True


def test_non_postgres_override_passes_through():
    settings = Settings(database_url_override="sqlite+aiosqlite:///./homework.db")

    assert settings.database_url == "sqlite+aiosqlite:///./homework.db"
