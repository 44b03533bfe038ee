"""学生端浏览：按分类分组列出启用的题目/笔记，打开 PDF。"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import MaterialNotFound, PdfNotAvailable
from app.repositories import material_repository as repo
from app.schemas.practice import CatalogEntry, CatalogGroup, CatalogResponse, MaterialKind
from app.services.category_service import fetch_categories

logger = logging.getLogger(__name__)

PDF_MISSING_NOTICE = "PDF not available"
LOAD_FAILED_NOTICE = "Failed to load practice materials"


def _to_entry(item) -> CatalogEntry:
    pdf_url = item.pdf_url or None
    return CatalogEntry(
        id=item.id,
        title=item.title,
        description=item.description,
        pdf_url=pdf_url,
        thumbnail_url=item.thumbnail_url,
        difficulty_level=getattr(item, "difficulty_level", None),
        subject=item.subject,
        class_level=item.class_level,
        pdf_available=pdf_url is not None,
        notice=None if pdf_url else PDF_MISSING_NOTICE,
    )


async def render_catalog(db: AsyncSession, kind: MaterialKind) -> CatalogResponse:
    """
    分组顺序按分类 order_index，组内按条目 order_index（查询已排序，分组时保持原顺序）。
    没有条目的分类不返回；条目指向未启用/不存在的分类时不展示。
    """
    lister = repo.list_questions if kind == MaterialKind.QUESTIONS else repo.list_notes
    try:
        categories = await fetch_categories(db, active_only=True)
        items = await lister(db, active_only=True)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("[catalog] 加载 %s 失败: %s", kind.value, exc)
        return CatalogResponse(kind=kind, notice=LOAD_FAILED_NOTICE)

    by_category: dict[str, list[CatalogEntry]] = {}
    for item in items:
        by_category.setdefault(item.category_id, []).append(_to_entry(item))

    groups = [
        CatalogGroup(category=category, items=by_category[category.id])
        for category in categories
        if by_category.get(category.id)
    ]
    return CatalogResponse(kind=kind, groups=groups, total=sum(len(g.items) for g in groups))


async def get_pdf_url(db: AsyncSession, kind: MaterialKind, item_id: str) -> str:
    """返回可在新窗口打开的 PDF 地址；条目不存在或未启用报 404，无 PDF 报 PdfNotAvailable。"""
    getter = repo.get_question if kind == MaterialKind.QUESTIONS else repo.get_note
    item = await getter(db, item_id)
    if item is None or not item.is_active:
        raise MaterialNotFound()
    if not item.pdf_url:
        raise PdfNotAvailable()
    return item.pdf_url
