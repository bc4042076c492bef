"""Общие фикстуры: БД SQLite в памяти и тестовый клиент FastAPI"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import docshare.db.models  # noqa: F401
from docshare.core.db import Base, get_db
from docshare.db.repositories.user_repository import UserRepository
from docshare.domains.comments.feed import CommentFeed
from docshare.domains.documents.services import DocumentService
from docshare.domains.identity.entities import User
from docshare.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_session_factory):
    """Клиент FastAPI с подмененной зависимостью БД"""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def feed():
    return CommentFeed()


async def make_user(session: AsyncSession, email: str, display_name: str = "", verified: bool = True) -> User:
    user = User.create_user(email, "password123", display_name)
    user.email_verified = verified
    return await UserRepository(session).create(user)


@pytest.fixture
async def owner(test_db):
    return await make_user(test_db, "owner@example.com", "Owner")


@pytest.fixture
async def alice(test_db):
    return await make_user(test_db, "alice@example.com", "Alice")


@pytest.fixture
async def bob(test_db):
    return await make_user(test_db, "bob@example.com", "Bob")


@pytest.fixture
async def essay(test_db, owner):
    """Документ владельца, зарегистрированный в индексе"""
    return await DocumentService(test_db).save_document(
        owner.id, "essay-1", {"blocks": [{"id": "b1", "type": "claim", "text": "Thesis"}]}, "My Essay"
    )
