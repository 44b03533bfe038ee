"""学生端练习区：GET /practice/{kind} 按分类分组列表；GET /practice/{kind}/{item_id}/pdf 跳转到 PDF。"""
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.db import get_db
from app.models.user import User
from app.schemas.practice import CatalogResponse, MaterialKind
from app.services.catalog_service import get_pdf_url, render_catalog

router = APIRouter()


@router.get("/{kind}", response_model=CatalogResponse)
async def list_catalog(
    kind: MaterialKind,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await render_catalog(db, kind)


@router.get("/{kind}/{item_id}/pdf")
async def open_pdf(
    kind: MaterialKind,
    item_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """前端在新窗口打开本地址，服务端 307 跳转到存储中的 PDF。"""
    return RedirectResponse(await get_pdf_url(db, kind, item_id), status_code=307)
