"""Database URL normalization tests."""
import pytest

from app.core.database import normalize_async_database_url, normalize_sync_database_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql+asyncpg://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql+psycopg://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("sqlite:///./app.db", "sqlite+aiosqlite:///./app.db"),
        ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ],
)
def test_async_url(url, expected):
    assert normalize_async_database_url(url) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("sqlite+aiosqlite:///./app.db", "sqlite:///./app.db"),
        ("sqlite:///./app.db", "sqlite:///./app.db"),
    ],
)
def test_sync_url(url, expected):
    assert normalize_sync_database_url(url) == expected
