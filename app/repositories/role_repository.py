"""用户角色（UserRole）数据访问层。"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import new_id
from app.models.user_role import ROLE_STUDENT, UserRole


async def get_role_row(db: AsyncSession, user_id: str) -> UserRole | None:
    """查询用户的角色行，不存在返回 None。"""
    result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
    return result.scalars().first()


async def create_role_row(db: AsyncSession, user_id: str, role: str = ROLE_STUDENT) -> UserRole:
    """插入角色行。user_id 唯一，并发重复插入由调用方处理 IntegrityError。"""
    row = UserRole(id=new_id(), user_id=user_id, role=role)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


async def set_role(db: AsyncSession, user_id: str, role: str) -> UserRole:
    """设置用户角色，已有行则覆盖（供运维脚本提升管理员）。"""
    row = await get_role_row(db, user_id)
    if row is None:
        return await create_role_row(db, user_id, role)
    row.role = role
    await db.commit()
    await db.refresh(row)
    return row
