import os
import tempfile
from dataclasses import replace

# 在导入 app 前设置环境变量：Settings 在导入时读取
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="practice-zone-storage-"))

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core import storage as core_storage
from app.core.db import enable_sqlite_foreign_keys, get_db
from app.core.security import create_access_token
from app.main import app  # noqa: E402
from app.models import Base, User
from app.repositories.role_repository import set_role
from app.repositories.user_repository import create_user
from app.services import storage_service


@pytest.fixture
async def db_engine(tmp_path):
    """每个测试一个独立的 SQLite 文件库。"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'practice.db'}", poolclass=NullPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def bucket(tmp_path, monkeypatch):
    """把对象存储指向临时目录，返回 bucket 目录。"""
    patched = replace(core_storage.settings, storage_dir=str(tmp_path / "storage"))
    monkeypatch.setattr(core_storage, "settings", patched)
    monkeypatch.setattr(storage_service, "settings", patched)
    core_storage.ensure_storage_dirs()
    return core_storage.bucket_dir()


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _make_user(db, username: str, role: str | None) -> User:
    user = await create_user(db, username=username, password_hash="not-a-real-hash")
    if role is not None:
        await set_role(db, user.id, role)
    return user


@pytest.fixture
async def admin_user(db):
    return await _make_user(db, "admin", "admin")


@pytest.fixture
async def student_user(db):
    return await _make_user(db, "student", "student")


@pytest.fixture
async def roleless_user(db):
    return await _make_user(db, "newcomer", None)


@pytest.fixture
def headers_for():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
