"""分类初始化与分类选择。"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthenticationRequired, AuthorizationDenied, CategoryResolutionFailed
from app.repositories.category_repository import insert_categories_if_absent, list_categories
from app.schemas.practice import CategoryItem, RoleInfo
from app.services.context import SubmissionContext
from app.services.role_service import resolve_role

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {
        "name": "Question Papers",
        "description": "Previous year question papers and sample papers",
        "icon": "📝",
        "order_index": 1,
    },
    {
        "name": "Study Notes",
        "description": "Chapter-wise notes and summaries",
        "icon": "📚",
        "order_index": 2,
    },
    {
        "name": "Practice Tests",
        "description": "Mock tests and practice quizzes",
        "icon": "🧪",
        "order_index": 3,
    },
    {
        "name": "Reference Materials",
        "description": "Additional study materials and resources",
        "icon": "📖",
        "order_index": 4,
    },
]


async def fetch_categories(db: AsyncSession, *, active_only: bool = False) -> list[CategoryItem]:
    rows = await list_categories(db, active_only=active_only)
    return [CategoryItem.model_validate(row) for row in rows]


async def ensure_default_categories(db: AsyncSession) -> None:
    """写入四个默认分类。按名称幂等，已存在的分类不会重复插入；其他数据库错误视为初始化失败。"""
    try:
        await insert_categories_if_absent(db, DEFAULT_CATEGORIES)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("[category] 默认分类初始化失败: %s", exc)
        raise CategoryResolutionFailed() from exc
    logger.info("[category] 默认分类已就绪")


async def load_categories(db: AsyncSession, role: RoleInfo | None) -> list[CategoryItem]:
    """管理端加载分类：管理员看全部并在为空时初始化默认分类，其他人只看启用的分类。"""
    is_admin = role is not None and role.is_admin
    categories = await fetch_categories(db, active_only=not is_admin)
    if not categories and is_admin:
        await ensure_default_categories(db)
        categories = await fetch_categories(db)
    return categories


async def _ensure_may_bootstrap(db: AsyncSession, ctx: SubmissionContext) -> None:
    """初始化默认分类是写操作，只允许管理员。"""
    if ctx.known_admin:
        return
    if ctx.user_id is None:
        raise AuthenticationRequired()
    ctx.role = await resolve_role(db, ctx.user_id)
    if not ctx.role.is_admin:
        logger.warning("[category] user_id=%s 非管理员，不能初始化默认分类", ctx.user_id)
        raise AuthorizationDenied()


async def resolve_category_id(db: AsyncSession, ctx: SubmissionContext, category_id: str | None) -> str:
    """
    表单分类为空时选择分类：
    1. 一个分类都没有：初始化默认分类，重新查询后取第一个；
    2. 否则取已加载列表（按 order_index 升序）的第一个；
    3. 仍然没有则报初始化失败，提示用户重试。
    """
    if category_id:
        return category_id
    categories = ctx.categories
    if categories is None:
        categories = await fetch_categories(db)
    if categories:
        return categories[0].id

    await _ensure_may_bootstrap(db, ctx)
    await ensure_default_categories(db)
    fresh = await fetch_categories(db)
    if not fresh:
        raise CategoryResolutionFailed()
    ctx.categories = fresh
    return fresh[0].id
