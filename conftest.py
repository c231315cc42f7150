import os
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Settings are cached on first use, so the test environment is fixed here
# before any application module is imported.
# Use a file-based SQLite DB; every aiosqlite connection to :memory: would
# see its own empty database.
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_stackfit"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_stackfit"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "test-admin-password"

from dotenv import load_dotenv  # noqa: E402

# Optional local overrides (e.g. TIMEZONE) without touching the ones above
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=False)

from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402

# Import all models so metadata includes every table
from libs.auth import permissions as _permissions  # noqa: E402,F401
from services.attendance_service import models as _attendance_models  # noqa: E402,F401
from services.members_service import models as _member_models  # noqa: E402,F401
from services.payments_service import models as _payment_models  # noqa: E402,F401

get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh schema for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    try:
        os.remove("./test.db")
    except OSError:
        pass


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session shared by the test and the app under test.

    Routes commit on this session, so the test sees their writes directly.
    """
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()
