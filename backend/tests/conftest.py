"""Shared fixtures -- temporary SQLite stores and an HTTP client."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import DocumentStore
from app.main import create_app
from app.services.task_repository import TaskRepository
from app.services.user_registry import UserRegistry


class FakeClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 2, 20, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> AsyncGenerator[DocumentStore, None]:
    async with DocumentStore(sqlite_url(tmp_path / "test.db")) as s:
        yield s


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repo(store: DocumentStore, clock: FakeClock) -> TaskRepository:
    return TaskRepository(store, now=clock)


@pytest.fixture
def registry(store: DocumentStore) -> UserRegistry:
    return UserRegistry(store)


@pytest.fixture
def client(tmp_path: Path):
    settings = Settings(database_url=sqlite_url(tmp_path / "api.db"), cors_origins=["*"])
    with TestClient(create_app(settings)) as c:
        yield c
