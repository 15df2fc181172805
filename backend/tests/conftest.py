"""测试夹具：内存 SQLite 数据库、会话、HTTP 客户端和数据工厂"""
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_session
from app.main import app
from app.models import Base, Tool, User


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    """走完整路由的客户端，每个请求使用测试数据库的新会话"""
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_tool(db):
    async def _make_tool(**overrides) -> Tool:
        data = {
            "name": "Interactive Flashcards",
            "description": "Study heritage with flashcards",
            "category": "Educational Tools",
            "path": "/education?section=flashcards",
        }
        data.update(overrides)
        tool = Tool(**data)
        db.add(tool)
        await db.commit()
        await db.refresh(tool)
        return tool

    return _make_tool


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def _make_user(**overrides) -> User:
        counter["n"] += 1
        data = {
            "first_name": "User",
            "last_name": str(counter["n"]),
            "email": f"user{counter['n']}@example.com",
        }
        data.update(overrides)
        user = User(**data)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make_user
