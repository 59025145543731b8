"""Database engine creation for the async SQLite local store.

This module provides factory functions for creating the store engine with
async support using aiosqlite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from infrastructure.settings import StoreSettings

__all__ = [
    "create_store_engine",
    "build_sqlite_url",
]


def create_store_engine(settings: StoreSettings) -> AsyncEngine:
    """Create the async engine backing the local store.

    Args:
        settings: Local store settings

    Returns:
        Configured async engine for the SQLite file
    """
    return create_async_engine(
        build_sqlite_url(settings),
        echo=settings.echo,
    )


def build_sqlite_url(settings: StoreSettings) -> str:
    """Build the async database URL for aiosqlite.

    Args:
        settings: Local store settings

    Returns:
        Connection URL string in format: sqlite+aiosqlite:///path/to/file.db
    """
    url = URL.create(
        drivername="sqlite+aiosqlite",
        database=settings.path,
    )
    return url.render_as_string(hide_password=False)
