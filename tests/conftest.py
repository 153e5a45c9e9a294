import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BLOG_ADMIN_KEY", "test-admin-key")
os.environ.setdefault("OTP_RECIPIENT_EMAIL", "owner@example.com")
os.environ.setdefault("MAIL_RELAY_URL", "https://relay.test/exec")

from unittest.mock import AsyncMock, patch  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.blog import BlogPost  # noqa: E402
from app.models.otp import OTPCode  # noqa: E402, F401

TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

RELAY_PATCH = "app.services.notifier.post_to_relay"
ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}
RECIPIENT = "owner@example.com"


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


@pytest_asyncio.fixture
async def db():
    eng = create_async_engine(TEST_DB_URL, echo=False, **_engine_kwargs(TEST_DB_URL))
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def client(db):
    async def _override_db():
        yield db

    app.dependency_overrides[get_db] = _override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def relay():
    with patch(RELAY_PATCH, new_callable=AsyncMock, return_value=None) as mock:
        yield mock


@pytest_asyncio.fixture
async def blog_post(db: AsyncSession):
    post = BlogPost(
        title="Partitioning Parquet for fun",
        description="Notes from a data pipeline rewrite",
        content="word " * 450,
        tags=["etl", "spark"],
        read_time="3 min read",
        date="2026-01-15",
        time="09:30",
    )
    db.add(post)
    await db.commit()
    await db.refresh(post)
    return post
