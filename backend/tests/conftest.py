from dataclasses import dataclass, field
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from collaboration.application.sessions import SessionRegistry
from collaboration.infrastructure.yjs_adapter import create_doc
from main import app
from shared.dependencies import get_db, get_session_registry
from shared.infrastructure.database import Base
from versioning.application.recorder import EditRecorder

import versioning.infrastructure.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def advance(self, ms: int) -> None:
        self.now += ms

    def __call__(self) -> int:
        return self.now


@dataclass
class StaticPresence:
    client_id: int = 42
    state: dict[str, Any] | None = field(default_factory=lambda: {"user": {"name": "Alice", "color": "#ff0000"}})

    def get_local_state(self) -> dict[str, Any] | None:
        return self.state


@dataclass
class RecordedHistory:
    edits: list
    snapshots: list
    texts: list[str]  # live text right after each edit


def record_history(steps, snapshot_interval: int = 3, gap_ms: int = 1000) -> RecordedHistory:
    """Apply ``steps`` (callables taking the shared Text) to a tracked doc."""
    clock = FakeClock()
    doc = create_doc()
    recorder = EditRecorder(snapshot_interval, clock=clock)
    recorder.initialize(doc, StaticPresence())
    text = doc["content"]

    texts = []
    for step in steps:
        clock.advance(gap_ms)
        step(text)
        texts.append(str(text))

    return RecordedHistory(recorder.get_edits(), recorder.get_snapshots(), texts)


def _insert(index: int, value: str):
    def step(text):
        text.insert(index, value)

    return step


def _delete(start: int, stop: int):
    def step(text):
        del text[start:stop]

    return step


EDIT_STEPS = [
    _insert(0, "Hello"),
    _insert(5, " world"),
    _insert(0, ">> "),
    _delete(0, 3),
    _insert(5, ","),
    _insert(12, "!"),
    _delete(5, 6),
    _insert(0, "Well, "),
    _insert(len("Well, Hello world!"), " Bye."),
    _delete(0, 6),
]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def presence():
    return StaticPresence()


@pytest.fixture
def history() -> RecordedHistory:
    return record_history(EDIT_STEPS)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db(test_engine):
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def registry():
    registry = SessionRegistry(snapshot_interval=3)
    yield registry
    registry.close_all()


@pytest.fixture
async def client(test_engine, registry):
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_session_registry] = lambda: registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
