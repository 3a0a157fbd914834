import os

# antes de importar ripclips: la config se lee al importar
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("MODERATOR_IDS", "mod-1")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ripclips.clips.models import Clip
from ripclips.db.base import Base
from ripclips.db.session import get_session
from ripclips.main import app

from helpers import hours_ago


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def add_clip(session_factory):
    """Inserta un clip directo en la DB (sin pasar por la moderación)."""

    async def _add(clip_id: str, **overrides) -> str:
        data = {
            "id": clip_id,
            "clip_url": f"https://clips.twitch.tv/{clip_id}",
            "title": f"Clip {clip_id}",
            "game": "Path of Exile",
            "streamer": "someone",
            "description": "",
            "submitted_by": "tester",
            "status": "approved",
            "submitted_at": hours_ago(1),
            "likes": 0,
            "views": 0,
            "comments": 0,
        }
        data.update(overrides)
        async with session_factory() as session:
            session.add(Clip(**data))
            await session.commit()
        return clip_id

    return _add


@pytest.fixture
async def client(session_factory):
    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

