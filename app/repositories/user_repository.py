"""用户（User）数据访问层。"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import new_id
from app.models.user import User


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """按用户名查询用户，不存在返回 None。"""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """按用户 ID 查询用户，不存在返回 None。"""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalars().first()


async def create_user(
    db: AsyncSession,
    *,
    username: str,
    password_hash: str,
    name: str | None = None,
) -> User:
    """创建新用户，name 为空时用 username 作为显示名。角色行不在这里创建，首次校验时懒创建。"""
    user = User(
        id=new_id(),
        username=username,
        password_hash=password_hash,
        name=name or username,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
