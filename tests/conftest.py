"""Shared test configuration: throwaway SQLite database per test, no log files."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILES", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from app.core.database import Base, get_db
from app.main import app
from app.models import Student


@pytest.fixture
async def test_engine(tmp_path):
    # file database so separate sessions get separate connections
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'scoreboard.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_session_factory):
    """FastAPI test client with get_db pointed at the test database."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def new_student():
    """Unsaved student with zero aggregates, for pure aggregate tests."""
    def make(name="Ali"):
        return Student(name=name, points=0, total=0, details=[])
    return make
