"""Shared test fixtures and configuration."""
import os

# Settings are read on first access; tests run against in-memory SQLite
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-hs256-signing-0123")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from backoffice.application.auth_rate_limit import auth_rate_limiter  # noqa: E402
from backoffice.database import build_engine  # noqa: E402
from backoffice.models import Admin, Base, Permission, Role, User  # noqa: E402
from backoffice.security.passwords import BcryptHasher  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_rate_limit():
    auth_rate_limiter.clear()
    yield
    auth_rate_limiter.clear()


@pytest.fixture
async def engine():
    test_engine = build_engine("sqlite+aiosqlite://")
    async with test_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def session(engine):
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session


@pytest.fixture
def hasher() -> BcryptHasher:
    return BcryptHasher(rounds=4)


@pytest.fixture
def make_admin(session, hasher):
    async def _make_admin(
        email: str = "admin@example.com",
        *,
        name: str = "Admin",
        password: str = "secret123",
        status: int = 1,
        is_system: int = 0,
    ) -> Admin:
        admin = Admin(
            email=email,
            name=name,
            password=hasher.hash(password),
            status=status,
            is_system=is_system,
        )
        session.add(admin)
        await session.commit()
        await session.refresh(admin)
        return admin

    return _make_admin


@pytest.fixture
def make_user(session, hasher):
    async def _make_user(
        email: str = "user@example.com",
        *,
        name: str = "User",
        phone_no: str | None = None,
        status: int = 1,
    ) -> User:
        user = User(
            email=email,
            name=name,
            phone_no=phone_no,
            password=hasher.hash("secret123"),
            status=status,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_role(session):
    async def _make_role(
        name: str = "editor", type: str = "admin", *, status: int = 1, is_system: int = 0
    ) -> Role:
        role = Role(name=name, type=type, status=status, is_system=is_system)
        session.add(role)
        await session.commit()
        await session.refresh(role)
        return role

    return _make_role


@pytest.fixture
def make_permission(session):
    async def _make_permission(name: str, type: str = "admin", parent_id=None) -> Permission:
        permission = Permission(name=name, type=type, parent_id=parent_id)
        session.add(permission)
        await session.commit()
        await session.refresh(permission)
        return permission

    return _make_permission
