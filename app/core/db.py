from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def _to_async_url(url: str) -> str:
    if url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite 默认不校验外键，连接建立时打开，保证 category_id 约束与 Postgres 一致。"""
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(_to_async_url(settings.database_url), echo=settings.db_echo, future=True)
enable_sqlite_foreign_keys(engine)
# expire_on_commit=False：commit 后仍可读取 ORM 属性，避免懒加载触发 MissingGreenlet
SessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, autoflush=False, autocommit=False, expire_on_commit=False
)
Base = declarative_base()


async def get_db():
    async with SessionLocal() as db:
        yield db
