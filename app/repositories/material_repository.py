"""练习题目（PracticeQuestion）与学习笔记（PracticeNote）数据访问层。

写操作把数据库错误映射为 app.core.errors 中的业务异常，不做重试。
"""
import logging
from typing import Any, Type

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ForeignKeyViolation,
    GenericPersistenceFailure,
    MaterialNotFound,
    PracticeZoneError,
    RequiredFieldMissing,
)
from app.models.base import MaterialMixin, new_id
from app.models.practice_note import PracticeNote
from app.models.practice_question import PracticeQuestion

logger = logging.getLogger(__name__)

# Postgres SQLSTATE
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"


def map_db_error(exc: SQLAlchemyError) -> PracticeZoneError:
    """把数据库异常映射为业务异常。asyncpg 带 sqlstate，SQLite 只能看报错文本。"""
    if isinstance(exc, IntegrityError):
        orig = exc.orig
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        text = str(orig).lower()
        if code == FOREIGN_KEY_VIOLATION or "foreign key" in text:
            return ForeignKeyViolation()
        if code == NOT_NULL_VIOLATION or "not null" in text:
            return RequiredFieldMissing()
    return GenericPersistenceFailure()


async def _list(db: AsyncSession, model: Type[MaterialMixin], active_only: bool) -> list:
    q = select(model)
    if active_only:
        q = q.where(model.is_active.is_(True))
    result = await db.execute(q.order_by(model.order_index, model.created_at))
    return list(result.scalars().all())


async def _get(db: AsyncSession, model: Type[MaterialMixin], item_id: str):
    result = await db.execute(select(model).where(model.id == item_id))
    return result.scalars().first()


async def _create(db: AsyncSession, model: Type[MaterialMixin], values: dict[str, Any]):
    item = model(id=new_id(), **values)
    db.add(item)
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("[%s] 插入失败: %s", model.__tablename__, exc)
        raise map_db_error(exc) from exc
    await db.refresh(item)
    return item


async def _update(db: AsyncSession, model: Type[MaterialMixin], item_id: str, values: dict[str, Any]):
    item = await _get(db, model, item_id)
    if item is None:
        raise MaterialNotFound()
    for key, value in values.items():
        setattr(item, key, value)
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("[%s] 更新失败 id=%s: %s", model.__tablename__, item_id, exc)
        raise map_db_error(exc) from exc
    await db.refresh(item)
    return item


async def _delete(db: AsyncSession, model: Type[MaterialMixin], item_id: str) -> None:
    try:
        result = await db.execute(delete(model).where(model.id == item_id))
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("[%s] 删除失败 id=%s: %s", model.__tablename__, item_id, exc)
        raise map_db_error(exc) from exc
    if result.rowcount == 0:
        raise MaterialNotFound()


async def list_questions(db: AsyncSession, *, active_only: bool = False) -> list[PracticeQuestion]:
    """按 order_index 升序列出题目。active_only=True 用于学生浏览页。"""
    return await _list(db, PracticeQuestion, active_only)


async def list_notes(db: AsyncSession, *, active_only: bool = False) -> list[PracticeNote]:
    """按 order_index 升序列出笔记。active_only=True 用于学生浏览页。"""
    return await _list(db, PracticeNote, active_only)


async def get_question(db: AsyncSession, item_id: str) -> PracticeQuestion | None:
    return await _get(db, PracticeQuestion, item_id)


async def get_note(db: AsyncSession, item_id: str) -> PracticeNote | None:
    return await _get(db, PracticeNote, item_id)


async def create_question(db: AsyncSession, values: dict[str, Any]) -> PracticeQuestion:
    return await _create(db, PracticeQuestion, values)


async def update_question(db: AsyncSession, item_id: str, values: dict[str, Any]) -> PracticeQuestion:
    return await _update(db, PracticeQuestion, item_id, values)


async def delete_question(db: AsyncSession, item_id: str) -> None:
    await _delete(db, PracticeQuestion, item_id)


async def create_note(db: AsyncSession, values: dict[str, Any]) -> PracticeNote:
    return await _create(db, PracticeNote, values)


async def update_note(db: AsyncSession, item_id: str, values: dict[str, Any]) -> PracticeNote:
    return await _update(db, PracticeNote, item_id, values)


async def delete_note(db: AsyncSession, item_id: str) -> None:
    await _delete(db, PracticeNote, item_id)
