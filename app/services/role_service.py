"""角色解析：查询用户角色，缺失时懒创建 student 行；任何查询异常都回落为 student，绝不默认放行为 admin。"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user_role import ROLE_ADMIN, ROLE_STUDENT, ROLES
from app.repositories.role_repository import create_role_row, get_role_row
from app.schemas.practice import RoleInfo

logger = logging.getLogger(__name__)

STUDENT = RoleInfo(role=ROLE_STUDENT, is_admin=False)


async def resolve_role(db: AsyncSession, user_id: str) -> RoleInfo:
    try:
        row = await get_role_row(db, user_id)
        if row is None:
            try:
                row = await create_role_row(db, user_id, ROLE_STUDENT)
                logger.info("[role] user_id=%s 无角色记录，已创建 student", user_id)
            except IntegrityError:
                # 并发请求已插入同一用户的角色行
                await db.rollback()
                row = await get_role_row(db, user_id)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("[role] user_id=%s 角色查询失败，按 student 处理: %s", user_id, exc)
        return STUDENT

    if row is None or row.role not in ROLES:
        return STUDENT
    return RoleInfo(role=row.role, is_admin=row.role == ROLE_ADMIN)
