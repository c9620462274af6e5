"""Async database engine, sessions and the request-scoped session dependency."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for the monetization tables."""


def async_database_url(url: str) -> str:
    """Force the asyncpg driver onto plain ``postgresql://`` URLs."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix) :]
    return url


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Create the engine on first use.

    Importing the API (and its tests) never opens a connection pool.
    """
    from api.config import get_settings

    settings = get_settings()
    return create_async_engine(
        async_database_url(str(settings.database_url)),
        echo=settings.debug,
        pool_pre_ping=True,
        # The monetize path runs a lookup, a count and an insert per request
        pool_size=10,
        max_overflow=20,
    )


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; commit when the handler returns, roll back when it raises."""
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]
