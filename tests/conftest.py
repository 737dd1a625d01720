import os
import tempfile

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must happen BEFORE importing app.* so Settings and the engine see it.
# ------------------------------------------------------------------
_DB_DIR = tempfile.mkdtemp(prefix="mealattend-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENV"] = "test"
os.environ.pop("REDIS_URL", None)
os.environ.pop("SUPER_ADMIN_EMAIL", None)

from sqlmodel import SQLModel

from app.main import app
from app.core.database import AsyncSessionLocal, engine, init_db
from app.core.security import create_access_token, hash_password
from app.models.enums import Capability, IdType
from app.models.user import User, UserRole, UserStatus
from app.services.auth_service import create_super_admin
from app.services.id_service import allocate_next_id

TEST_PASSWORD = "password123"


@pytest_asyncio.fixture(autouse=True)
async def fresh_db():
    """Every test starts from empty tables."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await init_db()
    yield


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def super_admin():
    async with AsyncSessionLocal() as session:
        return await create_super_admin(session, "Super Admin", "superadmin@example.com", TEST_PASSWORD)


@pytest.fixture
def make_user():
    """
    Factory: await make_user(UserRole.Admin, created_by=..., can_read_users=True)
    Users are created directly, bypassing the API's assignment rules.
    """

    async def _make(role=UserRole.User, created_by=None, email=None, status=UserStatus.Active, **flags):
        async with AsyncSessionLocal() as session:
            user_id = await allocate_next_id(session, IdType.USER)
            user = User(
                user_id=user_id,
                full_name=f"{role.value} {user_id[-5:]}",
                email=email or f"user{user_id[-5:]}@example.com",
                password_hash=hash_password(TEST_PASSWORD),
                role=role,
                status=status,
                password_change_required=False,
                created_by_id=created_by.id if created_by else None,
                **flags,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


def auth_headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), data={"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


ALL_FLAGS = {capability.value: True for capability in Capability}
