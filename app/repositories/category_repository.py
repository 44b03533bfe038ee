"""练习分类（PracticeCategory）数据访问层。"""
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import new_id
from app.models.practice_category import PracticeCategory

_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


async def list_categories(db: AsyncSession, *, active_only: bool = False) -> list[PracticeCategory]:
    """按 order_index 升序列出分类。active_only=True 用于学生浏览页。"""
    q = select(PracticeCategory)
    if active_only:
        q = q.where(PracticeCategory.is_active.is_(True))
    result = await db.execute(q.order_by(PracticeCategory.order_index, PracticeCategory.name))
    return list(result.scalars().all())


async def insert_categories_if_absent(db: AsyncSession, rows: list[dict]) -> None:
    """
    按 name 幂等插入分类：已存在同名分类则跳过，并发初始化不会产生重复行。
    Postgres / SQLite 用 ON CONFLICT (name) DO NOTHING，其余方言先查已有名称再插入缺失项。
    """
    values = [{"id": new_id(), **row} for row in rows]
    dialect = db.bind.dialect.name if db.bind is not None else ""
    insert_fn = _UPSERT_DIALECTS.get(dialect)
    if insert_fn is not None:
        stmt = insert_fn(PracticeCategory).values(values).on_conflict_do_nothing(index_elements=["name"])
        await db.execute(stmt)
    else:
        names = [v["name"] for v in values]
        result = await db.execute(select(PracticeCategory.name).where(PracticeCategory.name.in_(names)))
        existing = set(result.scalars().all())
        for v in values:
            if v["name"] not in existing:
                db.add(PracticeCategory(**v))
    await db.commit()
