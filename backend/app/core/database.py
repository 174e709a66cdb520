"""Engine lifecycle, sessions and the declarative base."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.exceptions import StoreError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class DocumentStore:
    """Holds the `users` and `tasks` collections.

    One instance is opened at startup and handed to the registry and the
    repository; nothing reaches the database through module globals.
    """

    def __init__(self, url: str, echo: bool = False, create_schema: bool = True) -> None:
        self.url = url
        self._echo = echo
        self._create_schema = create_schema
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return
        # Registers the mapped tables on Base.metadata
        import app.models  # noqa: F401

        engine = create_async_engine(self.url, echo=self._echo, pool_pre_ping=True)
        try:
            if self._create_schema:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            await engine.dispose()
            logger.exception("Could not initialise database schema")
            raise StoreError("Could not initialise database schema") from e

        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("Document store opened (%s)", engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Document store closed")

    async def ping(self) -> None:
        """Round-trip a trivial statement to confirm the connection."""
        async with self.session() as session:
            await session.execute(text("SELECT 1"))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise StoreError("Document store is not open")
        async with self._sessionmaker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.exception("Store operation failed")
                raise StoreError("Store operation failed") from e

    async def __aenter__(self) -> "DocumentStore":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store opened by the app lifespan."""
    return request.app.state.store
